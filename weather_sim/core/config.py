"""All tunable constants for the weather simulation.

Every magic number in the codebase must reference this file.
"""

# =============================================================================
# DIMENSIONS
# =============================================================================
DIMENSIONS: tuple[str, ...] = ("temperature", "wind", "precipitation", "humidity")
VALUE_MIN: int = -10
VALUE_MAX: int = 10

# =============================================================================
# RANDOM WALK
# =============================================================================
VARIABILITY_MIN: int = 0
VARIABILITY_MAX: int = 10
DEFAULT_VARIABILITY: int = 5

# Amplitude = variability / divisor. Temperature moves slower than the rest.
AMPLITUDE_DIVISORS: dict[str, float] = {
    "temperature": 4.0,
    "wind": 2.0,
    "precipitation": 2.0,
    "humidity": 2.0,
}

# =============================================================================
# FORECAST
# =============================================================================
FORECAST_DAYS: int = 5
FORECAST_VARIABILITY_STEP: float = 0.2  # extra uncertainty per day ahead
CHANGE_THRESHOLD: float = 0.5

CHANGE_PHRASES: dict[str, tuple[str, str]] = {
    "temperature": ("warmer", "cooler"),
    "wind": ("windier", "calmer"),
    "precipitation": ("wetter", "drier"),
    "humidity": ("more humid", "less humid"),
}

# =============================================================================
# TIME
# =============================================================================
HOURS_PER_DAY: int = 24
SECONDS_PER_HOUR: int = 3600
DEFAULT_UPDATE_FREQUENCY_HOURS: int = 6
UPDATE_FREQUENCY_RANGE: tuple[int, int] = (1, 24)

# Start hour of each period; a period lasts until the next start hour and the
# last entry wraps past midnight to the first.
HOUR_TABLE: list[tuple[int, str]] = [
    (2, "Late Night"),
    (5, "Early Morning"),
    (8, "Morning"),
    (12, "Noon"),
    (14, "Afternoon"),
    (18, "Evening"),
    (21, "Night"),
]

DEFAULT_SUNRISE: float = 6.0
DEFAULT_SUNSET: float = 18.0

# Game calendar
DAYS_PER_SEASON: int = 90
DEFAULT_DAYLIGHT_HOURS: float = 12.0
DAYLIGHT_HOURS: dict[str, float] = {
    "spring": 13.0,
    "summer": 16.0,
    "fall": 12.0,
    "autumn": 12.0,
    "winter": 10.0,
    "highSun": 15.0,
    "sunDescending": 12.0,
    "sunAscending": 11.0,
}
GAME_START_HOUR: float = 8.0

# =============================================================================
# ENGINE
# =============================================================================
CALCULATION_HISTORY_LIMIT: int = 5
DEFAULT_CAMPAIGN: str = "earth"

# =============================================================================
# NARRATION
# =============================================================================
NO_RULES_MESSAGE: str = "No special rules apply to current conditions."
DEFAULT_FAHRENHEIT_RANGE: tuple[float, float] = (0.0, 100.0)

OPENAI_ENDPOINT: str = "https://api.openai.com/v1/chat/completions"
DEFAULT_OPENAI_MODEL: str = "gpt-4o-mini"
AI_RATE_LIMIT_SECONDS: float = 5.0
AI_INITIAL_TOKENS: int = 300
AI_RETRY_EXTRA_TOKENS: int = 200
AI_TIMEOUT_SECONDS: float = 30.0

# =============================================================================
# SIMULATION
# =============================================================================
DEFAULT_SIMULATION_DAYS: int = 30
DEFAULT_STEP_HOURS: int = 6
DEFAULT_SEED: int = 42
