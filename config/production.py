import os

from .config import Config, DB_CONFIG

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = dict(DB_CONFIG)

REFERENCE_TIMEZONE = Config.REFERENCE_TIMEZONE
DEADLINE_HOUR = Config.DEADLINE_HOUR
DEADLINE_DAYS = Config.DEADLINE_DAYS
CLEANUP_MAX_AGE_DAYS = Config.CLEANUP_MAX_AGE_DAYS

ADMIN_USERNAME = Config.ADMIN_USERNAME
ADMIN_PASSWORD_HASH = Config.ADMIN_PASSWORD_HASH
SYNC_API_KEY = Config.SYNC_API_KEY

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
