"""
Global constants for the Smart Scheduler platform.

This module defines constants used throughout the application, including
template weekday keys, cache keys, lock prefixes and error messages.
"""

# Weekday keys of a weekly availability template (0 = Sunday)
WEEKDAY_KEYS = ("0", "1", "2", "3", "4", "5", "6")

# Booking cap periods
PERIOD_DAY = "day"
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"

# Cache keys
CACHE_KEY_AVAILABILITY = "availability:{link_id}:{start}:{end}:{timezone}"

# Lock keys (one per assignee; bookings for the same person serialize)
LOCK_KEY_ASSIGNEE = "booking:assignee:{user_id}"

# Notification events
EVENT_BOOKING_CONFIRMED = "booking.confirmed"

# Error messages for codes that do not come from a scheduler exception
ERROR_MESSAGES = {
    "validation_error": "Validation error",
    "not_authenticated": "Authentication credentials were not provided",
    "authentication_failed": "Authentication error",
    "permission_denied": "Permission denied",
    "not_found": "Resource not found",
    "method_not_allowed": "Method not allowed",
    "throttled": "Rate limit exceeded",
    "parse_error": "Malformed request",
}
