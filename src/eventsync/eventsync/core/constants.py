"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import TrackingType

# Templates issued when the caller supplies none.
DEFAULT_TRACKING_TEMPLATES = (
    (TrackingType.ATTENDANCE, "Event Attendance"),
    (TrackingType.FOOD_COUPON, "Lunch Coupon"),
    (TrackingType.FOOD_COUPON, "Dinner Coupon"),
)

# Embedded in the first-phase image, before the store has assigned an id.
PLACEHOLDER_TRACKING_ID = "temp"

DEFAULT_QR_IMAGE_SIZE = 300
DEFAULT_QR_BORDER = 2

MAX_LABEL_LENGTH = 191
UNKNOWN_SCANNER_NAME = "Unknown"
UNKNOWN_TEAM_NAME = "Unknown Team"
