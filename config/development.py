import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "breakfast_club"),
}

# HMAC key for the daily check-in QR codes
QR_SECRET = os.getenv("QR_SECRET", "dev-qr-secret")

# Bearer tokens issued by the identity provider
AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-auth-secret")
AUTH_ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE", "")
ADMIN_EMAILS = os.getenv("ADMIN_EMAILS", "")

BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/New_York")
# next_day: orders are always for tomorrow and always open.
# same_day_hours: orders are for today, accepted ORDER_START_HOUR..ORDER_END_HOUR only.
ORDER_WINDOW_POLICY = os.getenv("ORDER_WINDOW_POLICY", "next_day")
ORDER_START_HOUR = int(os.getenv("ORDER_START_HOUR", "9"))
ORDER_END_HOUR = int(os.getenv("ORDER_END_HOUR", "21"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
