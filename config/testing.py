from werkzeug.security import generate_password_hash

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "lab_attendance_test",
}

REFERENCE_TIMEZONE = "America/New_York"
DEADLINE_HOUR = 17
DEADLINE_DAYS = 1
CLEANUP_MAX_AGE_DAYS = 7

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD_HASH = generate_password_hash("admin-password")
SYNC_API_KEY = "test-sync-key"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
