"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "America/New_York"
DATE_KEY_FORMAT = "%Y-%m-%d"

DEFAULT_ORDER_START_HOUR = 9
DEFAULT_ORDER_END_HOUR = 21

MAX_NOTES_LENGTH = 500
MAX_DISPLAY_NAME_LENGTH = 100
MAX_DIETARY_RESTRICTIONS = 20
MAX_PHONE_LENGTH = 32  # users.phone_number VARCHAR(32)

QR_NONCE_BYTES = 16
QR_CODE_LENGTH = 64  # hex SHA-256 digest
