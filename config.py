import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as courtbooking.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "courtbooking.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Run db.create_all() at startup (local dev / tests). Production uses migrations.
    CREATE_TABLES_ON_STARTUP = os.getenv("CREATE_TABLES_ON_STARTUP", "false").lower() == "true"

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "courtbooking_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # bcrypt work factor
    BCRYPT_ROUNDS = 12

    # Cancellation policy
    CANCEL_CUTOFF_HOURS = int(os.getenv("CANCEL_CUTOFF_HOURS", "24"))
    # Whether a player cancelling a still-pending booking is held to the cutoff too
    CANCEL_WINDOW_APPLIES_TO_PENDING = os.getenv("CANCEL_WINDOW_APPLIES_TO_PENDING", "true").lower() == "true"

    # Pricing
    EQUIPMENT_SURCHARGE = int(os.getenv("EQUIPMENT_SURCHARGE", "50"))

    # Default hourly grid used when no weekly time slots are configured for a day
    BUSINESS_HOURS_START = 6
    BUSINESS_HOURS_END = 22

    # Dates and times are interpreted as wall-clock time in this zone
    VENUE_TIMEZONE = os.getenv("VENUE_TIMEZONE", "UTC")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CREATE_TABLES_ON_STARTUP = True
    CANCEL_CUTOFF_HOURS = 24
    CANCEL_WINDOW_APPLIES_TO_PENDING = True
    EQUIPMENT_SURCHARGE = 50
    VENUE_TIMEZONE = "UTC"
    LOG_LEVEL = "WARNING"
    BCRYPT_ROUNDS = 4
