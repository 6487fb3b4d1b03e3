import os

import sentry_sdk
from dotenv import load_dotenv
from flask import Flask
from sentry_sdk.integrations.flask import FlaskIntegration

from .config import CONFIG_BY_ENV
from .constants import ENV_DEVELOPMENT, ENV_PRODUCTION, ENV_STAGING

# Import extensions from the extensions module
from .extensions import cors


def create_app(config_class=None):
    """
    Application factory function to create and configure the Flask app.
    """
    app = Flask(__name__)

    # Load environment variables early
    load_dotenv()

    # --- Configuration ---
    if config_class is None:
        # Determine configuration based on FLASK_ENV environment variable
        env = os.getenv("FLASK_ENV", ENV_DEVELOPMENT)
        config_class = CONFIG_BY_ENV.get(env, CONFIG_BY_ENV[ENV_DEVELOPMENT])

    app.config.from_object(config_class)
    app.config["MAX_CONTENT_LENGTH"] = app.config.get("JSON_BODY_LIMIT_BYTES")

    # --- Sentry Initialization ---
    sentry_dsn = app.config.get("SENTRY_DSN")
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 1.0),
            profiles_sample_rate=app.config.get("SENTRY_PROFILES_SAMPLE_RATE", 1.0),
            environment=app.config.get("FLASK_ENV"),
            release=app.config.get("APP_VERSION", None),
        )
        app.logger.info(f"Sentry initialized for environment: {app.config.get('FLASK_ENV')}")
    else:
        app.logger.info("SENTRY_DSN not found. Sentry will not be initialized.")

    # --- CORS Configuration ---
    # For production, use the configured origins, credentials, and headers
    if app.config["FLASK_ENV"] == ENV_PRODUCTION or app.config["FLASK_ENV"] == ENV_STAGING:
        cors.init_app(
            app,
            resources={
                r"/*": {
                    "origins": app.config.get("CORS_ORIGINS", []),
                    "supports_credentials": app.config.get("CORS_SUPPORTS_CREDENTIALS", False),
                    "allow_headers": app.config.get("CORS_ALLOW_HEADERS", ["Content-Type"]),
                }
            },
        )
    else:  # For development, allow any origin
        cors.init_app(app, resources={r"/*": {"origins": "*", "allow_headers": ["Content-Type"]}})

    # --- Attendance Store and Cache ---
    from .services.attendance_service import AttendanceService
    from .stores import get_document_store

    app.attendance_service = AttendanceService(get_document_store(app.config))
    with app.app_context():
        app.attendance_service.initialize()

    # --- Register Blueprints ---
    from .routes.attendance import bp as attendance_bp
    from .routes.main import bp as main_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(attendance_bp)

    return app
