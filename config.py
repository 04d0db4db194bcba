import os
from dotenv import load_dotenv

load_dotenv()


def _default_db_uri() -> str:
    # Prefer PyMySQL driver for Windows compatibility
    user = os.environ.get('MYSQL_USER', 'root')
    password = os.environ.get('MYSQL_PASSWORD', 'root')
    host = os.environ.get('MYSQL_HOST', '127.0.0.1')
    port = os.environ.get('MYSQL_PORT', '3306')
    db = os.environ.get('MYSQL_DB', 'okfees')
    return f"mysql+pymysql://{user}:{password}@{host}:{port}/{db}"


def _int_env(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key'
    # Use DATABASE_URL if present; else build a sensible default using PyMySQL
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or _default_db_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Mail settings used for one-time recovery codes
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'true').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or MAIL_USERNAME or 'noreply@okfees.app'

    # Signed-in sessions older than this are ended by the session guard
    SESSION_LIFETIME_MINUTES = _int_env('SESSION_LIFETIME_MINUTES', 480)

    # Password recovery
    RECOVERY_CODE_LENGTH = _int_env('RECOVERY_CODE_LENGTH', 6)
    RECOVERY_CODE_TTL_MINUTES = _int_env('RECOVERY_CODE_TTL_MINUTES', 60)
    PASSWORD_MIN_LENGTH = _int_env('PASSWORD_MIN_LENGTH', 6)

    # Soft caps and list sizes
    EVENT_LIMIT = _int_env('EVENT_LIMIT', 6)
    TOPPER_LIMIT = _int_env('TOPPER_LIMIT', 10)
    PENDING_PAYMENTS_LIMIT = _int_env('PENDING_PAYMENTS_LIMIT', 10)
    DASHBOARD_ANNOUNCEMENT_LIMIT = _int_env('DASHBOARD_ANNOUNCEMENT_LIMIT', 3)
    ANNOUNCEMENT_FEED_LIMIT = _int_env('ANNOUNCEMENT_FEED_LIMIT', 10)
    # 'owner' shows only the principal's announcements, 'all' shows every institute's
    ANNOUNCEMENT_FEED_SCOPE = os.environ.get('ANNOUNCEMENT_FEED_SCOPE', 'owner')

    WHATSAPP_BASE_URL = os.environ.get('WHATSAPP_BASE_URL', 'https://wa.me')
    STUDENT_CODE_PREFIX = os.environ.get('STUDENT_CODE_PREFIX', 'STU')
