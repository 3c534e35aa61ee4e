"""
Application configuration and constants for the RideShare API Server.

This module centralizes environment-based configuration, pagination limits,
regular expressions, vehicle capacity rules, timezones, and other constants.

Configuration values can be overridden via environment variables.
"""

from os import environ
from zoneinfo import ZoneInfo


# ---------------------------------------------------------------------------
# Application metadata
# ---------------------------------------------------------------------------
API_TITLE = "RideShare API Server"
API_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Database configuration
# ---------------------------------------------------------------------------
PSQL_DB_DRIVER = environ.get("PSQL_DB_DRIVER", "postgresql")
PSQL_DB_USERNAME = environ.get("PSQL_DB_USERNAME", "postgres")
PSQL_DB_PORT = environ.get("PSQL_DB_PORT", "5432")
PSQL_DB_PASSWORD = environ.get("PSQL_DB_PASSWORD", "password")
PSQL_DB_HOST = environ.get("PSQL_DB_HOST", "localhost")
PSQL_DB_NAME = environ.get("PSQL_DB_NAME", "postgres")

# Full SQLAlchemy URL, takes precedence over the PSQL_* parts when set
DATABASE_URL = environ.get("DATABASE_URL", "")


# ---------------------------------------------------------------------------
# OpenObserve configuration
# ---------------------------------------------------------------------------
OPENOBSERVE_ENABLED = environ.get("OPENOBSERVE_ENABLED", "true").lower() == "true"
OPENOBSERVE_PROTOCOL = environ.get("OPENOBSERVE_PROTOCOL", "http")
OPENOBSERVE_HOST = environ.get("OPENOBSERVE_HOST", "localhost")
OPENOBSERVE_PORT = environ.get("OPENOBSERVE_PORT", "5080")
OPENOBSERVE_USERNAME = environ.get("OPENOBSERVE_USERNAME", "admin@rideshare.in")
OPENOBSERVE_PASSWORD = environ.get("OPENOBSERVE_PASSWORD", "password")
OPENOBSERVE_ORG = environ.get("OPENOBSERVE_ORG", "rideshare")
OPENOBSERVE_STREAM = environ.get("OPENOBSERVE_STREAM", "rideshare-core-server")
OPENOBSERVE_TIMEOUT = 5  # Request timeout (in seconds)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit within a 64 bit integer offset
MAX_PAGE = 10**9


# ---------------------------------------------------------------------------
# Regex constants (input validation)
# ---------------------------------------------------------------------------
REGEX_EMAIL = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
REGEX_PHONE = r"^[6-9]\d{9}$"  # Indian mobile number
REGEX_PAN = r"^[A-Z]{5}[0-9]{4}[A-Z]$"
REGEX_AADHAR = r"^\d{12}$"
REGEX_IFSC = r"^[A-Z]{4}0[A-Z0-9]{6}$"
REGEX_UPI = r"^[a-zA-Z0-9.\-_]{2,256}@[a-zA-Z][a-zA-Z]{2,64}$"
REGEX_DATE = r"^\d{4}-\d{2}-\d{2}$"
REGEX_PERSON_NAME = r"^[a-zA-Z\s]{2,50}$"
REGEX_REGISTRATION_NUMBER = r"^[A-Z]{2}\d{1,2}[A-Z]{1,2}\d{1,4}$"
REGEX_PINCODE = r"^[1-9][0-9]{5}$"
REGEX_TIME = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
REGEX_SCHOOL_CODE = r"^[A-Z0-9_-]{3,20}$"
REGEX_SCHOOL_NAME = r"^[a-zA-Z0-9\s.,'-]{2,100}$"


# ---------------------------------------------------------------------------
# Identity document constraints
# ---------------------------------------------------------------------------
MIN_LICENSE_LENGTH = 10
MAX_LICENSE_LENGTH = 20
MIN_USER_AGE = 13
MAX_USER_AGE = 120


# ---------------------------------------------------------------------------
# Driver constraints
# ---------------------------------------------------------------------------
MIN_DRIVER_RATING = 0
MAX_DRIVER_RATING = 5


# ---------------------------------------------------------------------------
# Vehicle constraints
# ---------------------------------------------------------------------------
MIN_VEHICLE_YEAR = 1990

# Seating capacity (min, max) per vehicle type
VEHICLE_CAPACITY = {
    "bike": (1, 2),
    "auto": (2, 6),
    "car": (4, 8),
    "van": (6, 15),
    "bus": (10, 60),
}


# ---------------------------------------------------------------------------
# Timezone constants
# ---------------------------------------------------------------------------
TMZ_PRIMARY = ZoneInfo("UTC")
