"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_REFERENCE_TIMEZONE = "America/New_York"

# Student self-service closes at 17:00 on the day after sign-in.
DEFAULT_DEADLINE_HOUR = 17
DEFAULT_DEADLINE_DAYS = 1

DEFAULT_CLEANUP_MAX_AGE_DAYS = 7
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
DEFAULT_WEEKLY_WINDOW_DAYS = 7

TOKEN_BYTES = 32

# Record store keys
STUDENTS_KEY = "students"
ATTENDANCE_KEY = "attendance"
PENDING_KEY = "pending_signouts"
