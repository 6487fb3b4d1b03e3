import os

from .constants import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_GITHUB_FILE_PATH,
    DEFAULT_LOCAL_STORE_PATH,
    ENV_DEVELOPMENT,
    ENV_PRODUCTION,
    ENV_STAGING,
    ENV_TESTING,
    STORE_GITHUB,
)


class Config:
    """Base configuration."""

    FLASK_ENV = os.getenv("FLASK_ENV", ENV_DEVELOPMENT)
    SENTRY_DSN = os.getenv("SENTRY_DSN")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "1.0"))
    SENTRY_PROFILES_SAMPLE_RATE = float(os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "1.0"))
    APP_VERSION = os.getenv("HEROKU_SLUG_COMMIT", "local")
    JSON_BODY_LIMIT_BYTES = int(os.getenv("JSON_BODY_LIMIT_BYTES", 10 * 1024 * 1024))

    # Attendance store selection
    ATTENDANCE_STORE = os.getenv("ATTENDANCE_STORE", STORE_GITHUB)

    # GitHub Configuration
    GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
    GITHUB_REPO = os.getenv("GITHUB_REPO")
    GITHUB_FILE_PATH = os.getenv("GITHUB_FILE_PATH", DEFAULT_GITHUB_FILE_PATH)
    GITHUB_BRANCH = os.getenv("GITHUB_BRANCH")
    GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
    GITHUB_COMMIT_MESSAGE = os.getenv("GITHUB_COMMIT_MESSAGE", DEFAULT_COMMIT_MESSAGE)
    GITHUB_TIMEOUT_SECONDS = float(os.getenv("GITHUB_TIMEOUT_SECONDS", "10"))

    # Local Store Configuration
    LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", DEFAULT_LOCAL_STORE_PATH)


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True
    FLASK_ENV = ENV_TESTING
    SENTRY_DSN = None


class StagingConfig(Config):
    """Staging configuration."""

    DEBUG = True
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.5"))
    SENTRY_PROFILES_SAMPLE_RATE = float(os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "0.25"))
    CORS_ORIGINS = os.getenv(
        "CORS_ORIGINS",
        "",
    ).split(",")
    CORS_SUPPORTS_CREDENTIALS = True
    CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))  # Lower sample rate for prod
    SENTRY_PROFILES_SAMPLE_RATE = float(os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "0.05"))
    CORS_ORIGINS = os.getenv(
        "CORS_ORIGINS",
        "",
    ).split(",")
    CORS_SUPPORTS_CREDENTIALS = True
    CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


CONFIG_BY_ENV = {
    ENV_DEVELOPMENT: DevelopmentConfig,
    ENV_STAGING: StagingConfig,
    ENV_PRODUCTION: ProductionConfig,
    ENV_TESTING: TestingConfig,
}
