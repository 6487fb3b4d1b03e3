import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..exceptions import MalformedDocumentException


def slot_key(date, period) -> str:
    """Key of a (date, period) slot inside the document, e.g. ``2024-01-01_3``."""
    return f"{date}_{period}"


@dataclass(frozen=True)
class AttendanceDocument:
    """
    The single persisted attendance document.

    ``attendance`` maps slot keys to the list of ``{"name", "present"}`` marks recorded for
    that slot. Documents are treated as immutable: ``with_slot`` returns a new document so a
    reader holding a reference never sees a half-applied change.
    """

    attendance: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AttendanceDocument":
        return cls(attendance={})

    def get_slot(self, key: str) -> list[dict[str, Any]]:
        return [dict(mark) for mark in self.attendance.get(key) or []]

    def with_slot(self, key: str, marks: list[dict[str, Any]]) -> "AttendanceDocument":
        attendance = dict(self.attendance)
        attendance[key] = [dict(mark) for mark in marks]
        return AttendanceDocument(attendance=attendance)

    def to_dict(self) -> dict[str, Any]:
        return {"attendance": self.attendance}


def parse_document(raw: Union[str, bytes]) -> AttendanceDocument:
    """
    Parse stored JSON into a document.

    A missing or null ``attendance`` member yields an empty mapping. Anything that is not a JSON
    object with an object-valued ``attendance`` raises MalformedDocumentException.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedDocumentException(f"Attendance document is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedDocumentException("Attendance document must be a JSON object")

    attendance: Optional[dict] = data.get("attendance")
    if attendance is None:
        return AttendanceDocument.empty()
    if not isinstance(attendance, dict):
        raise MalformedDocumentException("'attendance' must be a JSON object")

    slots = {}
    for key, marks in attendance.items():
        # A slot that is not a list carries no usable marks
        slots[key] = [mark for mark in marks if isinstance(mark, dict)] if isinstance(marks, list) else []

    return AttendanceDocument(attendance=slots)


def serialize_document(document: AttendanceDocument) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
