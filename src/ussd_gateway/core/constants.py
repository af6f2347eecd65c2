"""Gateway-wide constants."""

SESSION_ID_PREFIX = "USSD_"
DEFAULT_SESSION_TIMEOUT_SECONDS = 600
DEFAULT_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_MAX_RETRIES = 3
DEFAULT_LANGUAGE = "en"

RESPONSE_CONTINUE = "CON"
RESPONSE_END = "END"

# User-facing texts
MSG_INVALID_OPTION = "Invalid option. Please try again."
MSG_SESSION_EXPIRED = "Your session expired. Starting again."
MSG_SYSTEM_ERROR = "System error. Please try again later."
MSG_TOO_MANY_ATTEMPTS = "Too many invalid attempts. Please dial again."

# Separator between a notice/error prefix and the state message
MESSAGE_SEPARATOR = "\n\n"
