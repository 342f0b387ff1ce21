"""
Custom exceptions for the Smart Scheduler platform.

This module defines the API exception base and the booking rejection
taxonomy. Every rejection carries a stable `code` that clients can switch on
and a `retryable` flag telling them whether re-querying availability and
trying again can succeed.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status

from core.exceptions import SchedulerBaseException


class APIException(SchedulerBaseException):
    """Base exception for all API-related exceptions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = _("An unexpected error occurred.")
    code = "error"

    def __init__(self, message=None, status_code=None, errors=None):
        self.message = message or self.default_message
        if status_code:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self):
        """Convert exception to dictionary representation."""
        error_dict = {
            "code": self.code,
            "message": str(self.message),
            "status_code": self.status_code,
        }

        if self.errors:
            error_dict["errors"] = self.errors

        return error_dict


class BookingRejection(APIException):
    """A booking attempt was refused before anything was persisted."""

    status_code = status.HTTP_409_CONFLICT
    default_message = _("The booking could not be created.")
    code = "booking_rejected"
    retryable = False

    def to_dict(self):
        error_dict = super().to_dict()
        error_dict["retryable"] = self.retryable
        return error_dict


class BookingValidationError(BookingRejection):
    """Malformed request: wrong duration, misaligned slot, missing fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _("The booking request is invalid.")
    code = "validation_error"


class LeadTimeViolation(BookingRejection):
    """The requested slot starts sooner than the link's lead time allows."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = _("This slot is too soon to be booked.")
    code = "lead_time_violation"

    def __init__(self, min_lead_time, message=None):
        self.min_lead_time = min_lead_time
        super().__init__(
            message=message
            or _("Bookings require at least %(minutes)s minutes notice.")
            % {"minutes": min_lead_time},
            errors={"min_lead_time": min_lead_time},
        )


class CapacityExceeded(BookingRejection):
    """A per-day, per-week or per-month booking cap has been reached."""

    default_message = _("The booking limit for this period has been reached.")
    code = "capacity_exceeded"

    def __init__(self, period, limit, message=None):
        self.period = period
        self.limit = limit
        super().__init__(
            message=message
            or _("This link accepts at most %(limit)s bookings per %(period)s.")
            % {"limit": limit, "period": period},
            errors={"period": period, "limit": limit},
        )


class SlotConflict(BookingRejection):
    """The slot is no longer free; re-query availability and try again."""

    default_message = _("This slot is no longer available.")
    code = "slot_conflict"
    retryable = True


class NoMemberAvailable(BookingRejection):
    """Team assignment could not find an eligible member for the slot."""

    default_message = _("No team member is available for this slot.")
    code = "no_member_available"


class LinkExpired(BookingRejection):
    """The one-off link has already been used."""

    status_code = status.HTTP_410_GONE
    default_message = _("This booking link has expired.")
    code = "link_expired"


class LinkNotFound(BookingRejection):
    """Unknown or inactive booking link."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = _("Booking link not found.")
    code = "link_not_found"


class SideEffectFailure(SchedulerBaseException):
    """
    A post-booking side effect (meeting link, notification) failed.

    Never propagated to the booking caller: it is logged and reported as the
    `degraded` flag on the confirmed booking.
    """

    code = "side_effect_failure"
