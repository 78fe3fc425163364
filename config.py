import os
import tempfile
from dotenv import load_dotenv
load_dotenv()


def _int_or_none(name, default=None):
    val = os.getenv(name)
    if val is None or val == "":
        return default
    if val.lower() in ("none", "unlimited"):
        return None
    return int(val)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///neurocare.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # mail
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    MAIL_FROM = os.getenv("MAIL_FROM", "verification@neuro-care.fr")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "NeuroCare")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@neuro-care.fr")
    APP_URL = os.getenv("APP_URL", "https://neuro-care.fr")
    # regulator mail goes to ADMIN_EMAIL outside production
    DREETS_REDIRECT_TO_ADMIN = os.getenv("DREETS_REDIRECT_TO_ADMIN", "1") == "1"

    # storage
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")
    LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "./storage")
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")
    S3_REGION = os.getenv("S3_REGION")
    S3_BUCKET = os.getenv("S3_BUCKET")
    S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY")
    S3_SECRET_KEY = os.getenv("S3_SECRET_KEY")
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    SIGNED_URL_TTL = int(os.getenv("SIGNED_URL_TTL", 3600))
    REGULATOR_URL_TTL = int(os.getenv("REGULATOR_URL_TTL", 604800))  # 7 days

    # OCR collaborator
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OCR_MODEL = os.getenv("OCR_MODEL", "gpt-4o-mini")
    OCR_TIMEOUT = int(os.getenv("OCR_TIMEOUT", 60))

    # free tier limits, None = unlimited
    FREE_MAX_ACTIVE_CONVERSATIONS = _int_or_none("FREE_MAX_ACTIVE_CONVERSATIONS", 3)
    FREE_MAX_ACTIVE_BOOKINGS = _int_or_none("FREE_MAX_ACTIVE_BOOKINGS", 3)

    UID_DOMAIN = os.getenv("UID_DOMAIN", "neuro-care.fr")
    # naive interview dates are entered and stored in this zone
    INTERVIEW_TIMEZONE = os.getenv("INTERVIEW_TIMEZONE", "Europe/Paris")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    REDIS_URL = None
    SENDGRID_API_KEY = None
    OPENAI_API_KEY = None
    STORAGE_BACKEND = "local"
    LOCAL_STORAGE_DIR = os.path.join(tempfile.gettempdir(), "neurocare-test-storage")
    DREETS_REDIRECT_TO_ADMIN = False
