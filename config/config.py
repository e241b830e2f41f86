import os


class Config:
    """Settings shared by every environment."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "lab_attendance")

    REFERENCE_TIMEZONE = os.environ.get("REFERENCE_TIMEZONE", "America/New_York")
    DEADLINE_HOUR = int(os.environ.get("DEADLINE_HOUR", "17"))
    DEADLINE_DAYS = int(os.environ.get("DEADLINE_DAYS", "1"))
    CLEANUP_MAX_AGE_DAYS = int(os.environ.get("CLEANUP_MAX_AGE_DAYS", "7"))

    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    # werkzeug.security.generate_password_hash(...) output
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH", "")
    SYNC_API_KEY = os.environ.get("SYNC_API_KEY", "")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}
