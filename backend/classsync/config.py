import os

APP_TITLE = "ClassSync - class management API"

LOG_LEVEL = str(os.getenv("CLASSSYNC_LOG_LEVEL", "INFO") or "INFO").strip().upper()

LOCAL_STORAGE_FILE = os.getenv(
    "CLASSSYNC_LOCAL_STORAGE_FILE",
    os.path.join(os.path.expanduser("~"), ".classsync", "local_storage.json"),
)

# Keys mirror what the browser client kept in localStorage.
SESSION_STORAGE_KEY = "classSync_currentUser"
USERS_STORAGE_KEY = "classSync_users"
SUBJECTS_STORAGE_KEY = "classSync_subjects"

ACTIVITY_LOG_LOAD_LIMIT = max(1, int(os.getenv("CLASSSYNC_ACTIVITY_LOG_LIMIT", "50")))

SEAT_ROWS = 5
SEAT_COLUMNS = 7
SEAT_COUNT = SEAT_ROWS * SEAT_COLUMNS

DEFAULT_PASSWORD = "password"
BCRYPT_ROUNDS = 10
BCRYPT_PREFIX = "$2"

DEFAULT_TUTOR_EVENT_CAPACITY = 5

SESSION_TTL_SECONDS = max(900, int(os.getenv("CLASSSYNC_SESSION_TTL_SECONDS", "43200")))
SESSION_MAX_TOKENS = max(100, int(os.getenv("CLASSSYNC_SESSION_MAX_TOKENS", "5000")))
SESSION_COOKIE_NAME = "classsync_session"

SCHEDULE_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
