"""
Centralized Constants for the Klaviyo Flow Builder.
All hardcoded values should be defined here for easy maintenance.
"""

# ============================================
# KLAVIYO API
# ============================================
KLAVIYO_MEDIA_TYPE = "application/vnd.api+json"
KLAVIYO_AUTH_SCHEME = "Klaviyo-API-Key"
KLAVIYO_FLOW_RESOURCE_TYPE = "flow"

# ============================================
# FLOW VALUES
# ============================================
TRIGGER_TYPES = ("list", "segment")
STEP_STATUSES = ("draft", "live", "manual", "disabled")
DELAY_UNITS = ("minutes", "hours", "days")

DEFAULT_STEP_STATUS = "draft"
DEFAULT_DELAY_UNIT = "days"
DEFAULT_DELAY_TIMEZONE = "profile"

# Day delays may fire on any weekday
ALL_WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

# ============================================
# ERROR MESSAGES (returned to the form verbatim)
# ============================================
ERROR_MISSING_API_KEY = "KLAVIYO_API_KEY is not configured on the server."
ERROR_INVALID_JSON = "Invalid JSON payload."
ERROR_INVALID_SHAPE = "Invalid flow request payload."
ERROR_BUILD_FAILED = "Unable to construct Klaviyo flow payload."
ERROR_PROVIDER_REJECTED = "Klaviyo API request failed."
ERROR_PROVIDER_UNREACHABLE = "Failed to reach Klaviyo API."

# ============================================
# FORM CLIENT
# ============================================
TIMEOUT_FORM_SUBMIT = 60.0  # Browser -> server round trip (server waits on Klaviyo)
