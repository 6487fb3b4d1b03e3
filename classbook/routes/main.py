from flask import Blueprint, current_app, jsonify

bp = Blueprint("main", __name__)


# Health check endpoint
@bp.route("/health")
def health():
    service = current_app.attendance_service

    return (
        jsonify(
            {
                "status": "healthy",
                "message": "Classbook backend is running",
                "store": service.store.kind,
                "store_configured": service.store.is_configured,
                "cache_synced": service.cache.is_synced,
                "version": current_app.config.get("APP_VERSION", "unknown"),
                "environment": current_app.config.get("FLASK_ENV", "unknown"),
            }
        ),
        200,
    )


# Basic route
@bp.route("/")
def index():
    return jsonify(
        {
            "message": "Classbook attendance API",
            "version": current_app.config.get("APP_VERSION", "unknown"),
        }
    )
