"""
Limits and enumerations shared by the domain modules and MCP tools.
"""

# Pagination
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 50
MAX_PAGE_NUMBER = 10000
DEFAULT_PROPERTY_SEARCH_LIMIT = 10
MAX_PROPERTY_SEARCH_LIMIT = 50

# Guest counts
MIN_ADULTS = 1
MAX_ADULTS = 50
MAX_CHILDREN = 50
MAX_INFANTS = 20
MAX_TOTAL_GUESTS = 100

# Identifiers and strings
MAX_PROPERTY_ID_LENGTH = 100
MAX_THREAD_GUID_LENGTH = 100
CURRENCY_CODE_LENGTH = 3

# Prices
MIN_PRICE = 0
MAX_PRICE = 1_000_000

# Messaging
MIN_MESSAGE_LIMIT = 1
MAX_MESSAGE_LIMIT = 200

WEBHOOK_EVENTS = (
    "rate_change",
    "availability_change",
    "booking_new_any_status",
    "booking_new_status_booked",
    "booking_change",
    "booking_status_change_booked",
    "booking_status_change_tentative",
    "booking_status_change_open",
    "booking_status_change_declined",
    "guest_message_received",
)

BOOKING_STATUSES = ("booked", "tentative", "declined", "confirmed", "open")
STAY_FILTERS = (
    "Upcoming",
    "Current",
    "Historic",
    "All",
    "ArrivalDate",
    "DepartureDate",
)
DEFAULT_STAY_FILTER = "Upcoming"

# v1 booking status values expected by the API
V1_BOOKING_STATUS_MAP = {
    "booked": "Booked",
    "tentative": "Tentative",
    "declined": "Declined",
    "confirmed": "Booked",
    "open": "Open",
}
