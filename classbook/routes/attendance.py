from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from classbook.exceptions import StoreException
from classbook.schemas.attendance import MatrixRequest, MatrixRow, SaveSlotRequest

bp = Blueprint("attendance", __name__, url_prefix="/api")


@bp.get("/attendance/<date>/<period>")
def get_attendance(date: str, period: str):
    """Marks saved for one (date, period) slot; an unknown slot is an empty list."""
    return jsonify(current_app.attendance_service.get_slot(date, period))


@bp.post("/attendance")
def save_attendance():
    body = request.get_json(silent=True)
    try:
        data = SaveSlotRequest(**(body if isinstance(body, dict) else {}))
    except ValidationError as e:
        return jsonify({"error": e.errors(include_url=False, include_context=False)}), 400

    marks = [mark.model_dump() for mark in data.list]

    try:
        current_app.attendance_service.save_slot(data.date.isoformat(), data.period, marks)
    except StoreException as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"success": True})


@bp.post("/matrix")
def attendance_matrix():
    body = request.get_json(silent=True)
    data = MatrixRequest(**body) if isinstance(body, dict) else MatrixRequest()

    rows = current_app.attendance_service.build_matrix(data.weekDates)
    return jsonify([MatrixRow.model_validate(row).model_dump() for row in rows])
