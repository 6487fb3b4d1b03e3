# --- Environment Constants ---
ENV_DEVELOPMENT = "development"
ENV_STAGING = "staging"
ENV_PRODUCTION = "production"
ENV_TESTING = "testing"
# --- End Environment Constants ---

# --- Store Constants ---
STORE_GITHUB = "github"
STORE_LOCAL = "local"

DEFAULT_GITHUB_FILE_PATH = "daten/anwesenheit.json"
DEFAULT_LOCAL_STORE_PATH = "data/attendance.json"
DEFAULT_COMMIT_MESSAGE = "Update attendance list via app"

# --- Timetable Constants ---
FIRST_PERIOD = 1
LAST_PERIOD = 8  # Periods are numbered 1..8 inclusive
