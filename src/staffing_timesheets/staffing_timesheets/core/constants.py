"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAYS_PER_WEEK = 7
DEFAULT_WEEK_WINDOW = 52
MAX_WEEK_WINDOW = 520
MAX_HOURS_PER_DAY = 24.0
DEFAULT_OVERTIME_THRESHOLD_HOURS = 40.0
DEFAULT_LOOKUP_LIMIT = 100
DEFAULT_NOTIFICATION_TTL_SECONDS = 5

INVOICE_NUMBER_PLACEHOLDER = "TBD"
INVOICE_NUMBER_WIDTH = 6
