import os
from dotenv import load_dotenv
load_dotenv()


def _int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRES_MINUTES = _int("JWT_EXPIRES_MINUTES", 60)
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///bloombuddies.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # candidate store: "airtable" in production, "sql" for local work
    CANDIDATE_STORE = os.getenv("CANDIDATE_STORE", "sql")
    AIRTABLE_API_KEY = os.getenv("AIRTABLE_API_KEY")
    AIRTABLE_BASE_ID = os.getenv("AIRTABLE_BASE_ID")
    AIRTABLE_TABLE_NAME = os.getenv("AIRTABLE_TABLE_NAME", "Candidates")
    AIRTABLE_API_URL = os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0")
    AIRTABLE_TIMEOUT = _int("AIRTABLE_TIMEOUT", 10)

    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@example.com")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Bloom Buddies Team")
    NOTIFY_MAX_ATTEMPTS = _int("NOTIFY_MAX_ATTEMPTS", 3)
    NOTIFY_RETRY_DELAY_SECONDS = _int("NOTIFY_RETRY_DELAY_SECONDS", 5)
    STATUS_WEBHOOK_URL = os.getenv("STATUS_WEBHOOK_URL")

    VAPI_PUBLIC_KEY = os.getenv("VAPI_PUBLIC_KEY") or os.getenv("VAPI_API_KEY")
    VAPI_ASSISTANT_ID = os.getenv("VAPI_ASSISTANT_ID")
    VAPI_WEBHOOK_SECRET = os.getenv("VAPI_WEBHOOK_SECRET")

    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5000")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # interview window around the appointment, in minutes
    WINDOW_OPENS_BEFORE_MINUTES = _int("WINDOW_OPENS_BEFORE_MINUTES", 5)
    WINDOW_CLOSES_AFTER_MINUTES = _int("WINDOW_CLOSES_AFTER_MINUTES", 30)
    ADMISSION_LOCK_TIMEOUT = _int("ADMISSION_LOCK_TIMEOUT", 10)
    ADMISSION_LOCK_WAIT = _int("ADMISSION_LOCK_WAIT", 5)

    MAX_LOGIN_ATTEMPTS = _int("MAX_LOGIN_ATTEMPTS", 5)
    LOCKOUT_MINUTES = _int("LOCKOUT_MINUTES", 15)
    RESET_TOKEN_TTL_MINUTES = _int("RESET_TOKEN_TTL_MINUTES", 60)
    UID_DOMAIN = os.getenv("UID_DOMAIN", "bloombuddies.local")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET = "test-jwt-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    REDIS_URL = None
    CANDIDATE_STORE = "sql"
    SENDGRID_API_KEY = "SG.test"
    NOTIFY_RETRY_DELAY_SECONDS = 0
    STATUS_WEBHOOK_URL = None
    VAPI_PUBLIC_KEY = "vapi-public-test"
    VAPI_ASSISTANT_ID = "assistant-test"
    VAPI_WEBHOOK_SECRET = None
    FRONTEND_URL = "https://interviews.example.com"
