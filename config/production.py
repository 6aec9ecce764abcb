import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "breakfast_club"),
}

QR_SECRET = os.getenv("QR_SECRET", "please-set-QR_SECRET")

AUTH_SECRET = os.getenv("AUTH_SECRET", "please-set-AUTH_SECRET")
AUTH_ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE", "")
ADMIN_EMAILS = os.getenv("ADMIN_EMAILS", "")

BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/New_York")
ORDER_WINDOW_POLICY = os.getenv("ORDER_WINDOW_POLICY", "next_day")
ORDER_START_HOUR = int(os.getenv("ORDER_START_HOUR", "9"))
ORDER_END_HOUR = int(os.getenv("ORDER_END_HOUR", "21"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
