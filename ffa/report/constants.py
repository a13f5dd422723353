# constants.py
# Centralized constants used by the league reports. Do not change values without bumping schema_version.

SCHEMA_VERSION = "2.0.0"

DEFAULT_CURRENT_SEASON = "2025/26"

# Gameweek thresholds
HIGH_SCORE_THRESHOLD = 50.0

COMPETITION_TYPES = ("league", "goblet")

# Formatting
PPG_PLACES = 2
POINTS_PLACES = 2
RATING_PLACES = 1

# Throttling defaults
DEFAULT_MIN_INTERVAL_SEC = 0.10  # ~600 rpm
DEFAULT_TIMEOUT_SEC = 20.0
