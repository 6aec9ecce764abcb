import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "breakfast_club_test"),
}

QR_SECRET = "test-qr-secret"

AUTH_SECRET = "test-auth-secret"
AUTH_ALGORITHM = "HS256"
AUTH_AUDIENCE = ""
ADMIN_EMAILS = "admin@example.com"

BUSINESS_TIMEZONE = "America/New_York"
ORDER_WINDOW_POLICY = "next_day"
ORDER_START_HOUR = 9
ORDER_END_HOUR = 21

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
