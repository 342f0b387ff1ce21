"""
Booking Service Module for Smart Scheduler

This module turns a guest's chosen slot into a confirmed booking. Everything
the availability query showed is re-validated here, the recheck, assignment
and insert run under per-assignee locks inside one database transaction, and
the post-booking side effects are queued only after commit.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions.custom_exceptions import (
    BookingRejection,
    BookingValidationError,
    CapacityExceeded,
    LeadTimeViolation,
    LinkExpired,
    SlotConflict,
)
from utils.constants import LOCK_KEY_ASSIGNEE
from utils.distributed_locks import distributed_locks

from ..domain import (
    BookingAttempt,
    BookingAttemptState,
    BookingOutcome,
    BookingRequest,
    CandidateSlot,
)
from ..utils.date_utils import period_bounds
from ..utils.timezone_utils import owner_timezone
from .assignment_service import AssignmentResolver
from .busy_interval_collector import BusyIntervalCollector
from .conflict_filter import ConflictFilter
from .side_effects import BookingSideEffects
from .slot_generator import SlotGenerator
from .template_resolver import AvailabilityTemplateResolver

# Configure logging
logger = logging.getLogger(__name__)


class BookingService:
    """
    Coordinates one booking attempt from validation to confirmation.

    Stages: validating, availability recheck, assignment resolution,
    persisting, side effects, confirmed. A rejection in any of the first three
    leaves no trace in the database.
    """

    def __init__(
        self,
        storage,
        resolver=None,
        generator=None,
        collector=None,
        assigner=None,
        side_effects=None,
        clock=timezone.now,
        lock_timeout=None,
        lock_expires=None,
    ):
        self.storage = storage
        self.resolver = resolver or AvailabilityTemplateResolver(storage)
        self.generator = generator or SlotGenerator(self.resolver)
        self.collector = collector or BusyIntervalCollector(storage)
        self.assigner = assigner or AssignmentResolver(storage)
        self.side_effects = side_effects or BookingSideEffects()
        self.clock = clock
        self.lock_timeout = (
            lock_timeout
            if lock_timeout is not None
            else getattr(settings, "BOOKING_LOCK_TIMEOUT", 5)
        )
        self.lock_expires = lock_expires or getattr(settings, "BOOKING_LOCK_EXPIRES", 30)

    def create_booking_for_slug(self, slug, **fields) -> BookingOutcome:
        config = self.storage.get_link_config_by_slug(slug)
        return self.create_booking(BookingRequest(link_id=config.link_id, **fields))

    def create_booking(self, request: BookingRequest) -> BookingOutcome:
        """
        Book the requested slot.

        Args:
            request: Link id, slot bounds and guest details

        Returns:
            BookingOutcome with the booking, its assignee and whether any side
            effect could not be queued

        Raises:
            BookingValidationError: wrong duration, unaligned start, beyond horizon
            LeadTimeViolation: slot starts too soon
            LinkExpired: one-off link already used
            CapacityExceeded: a per-day/week/month cap is reached
            SlotConflict: the slot is no longer free (retryable)
            NoMemberAvailable: team assignment found nobody
        """
        attempt = BookingAttempt(request=request)
        try:
            return self._run(attempt)
        except BookingRejection as e:
            logger.info(
                f"Booking on link {request.link_id} at {request.start} rejected "
                f"during {attempt.state.value}: {e.code}"
            )
            attempt.advance(BookingAttemptState.REJECTED)
            raise

    def _run(self, attempt: BookingAttempt) -> BookingOutcome:
        request = attempt.request
        config = self.storage.get_link_config(request.link_id)
        schedule_tz = owner_timezone(self.storage, config.owner_id)

        self._validate(config, request, schedule_tz)
        slot = CandidateSlot(start=request.start, end=request.end)
        conflict_filter = ConflictFilter.for_link(config)

        assignees = self._assignees(config)
        lock_keys = [LOCK_KEY_ASSIGNEE.format(user_id=user_id) for user_id in assignees]

        with distributed_locks(
            lock_keys, expires=self.lock_expires, timeout=self.lock_timeout
        ) as acquired:
            if not acquired:
                logger.warning(
                    f"Could not lock assignees {assignees} for link {config.link_id} "
                    f"within {self.lock_timeout}s"
                )
                raise SlotConflict(
                    "Another booking for this time is being processed, please try again."
                )

            with transaction.atomic():
                config = self.storage.lock_link(config.link_id)
                # Only the users locked above may be checked and assigned
                if set(self._assignees(config)) != set(assignees):
                    logger.warning(
                        f"Team of link {config.link_id} changed while booking "
                        f"was waiting: locked {assignees}, now {self._assignees(config)}"
                    )
                    raise SlotConflict(
                        "The team for this link changed, please try again."
                    )
                if config.is_one_off and config.is_expired:
                    raise LinkExpired()
                self._check_lead_time(config, request)
                self._check_caps(config, request.start, schedule_tz)

                attempt.advance(BookingAttemptState.AVAILABILITY_RECHECK)
                busy = self.collector.collect(
                    assignees,
                    *conflict_filter.search_window(slot.start, slot.end),
                    tz=schedule_tz,
                )
                if not conflict_filter.free_members(slot, busy, config.member_ids):
                    raise SlotConflict()

                attempt.advance(BookingAttemptState.ASSIGNMENT_RESOLUTION)
                assigned_user_id = self.assigner.resolve(
                    config, slot, busy, conflict_filter
                )
                attempt.assigned_user_id = assigned_user_id

                attempt.advance(BookingAttemptState.PERSISTING)
                booking = self.storage.create_booking(config, request, assigned_user_id)
                if config.is_one_off:
                    self.storage.mark_link_expired(config.link_id)

        # Registered after the locks are released; runs once the transaction
        # commits, immediately unless an outer atomic block is still open
        attempt.advance(BookingAttemptState.SIDE_EFFECTS)
        side_effect_status = self.side_effects.schedule(booking, config)

        attempt.advance(BookingAttemptState.CONFIRMED)
        logger.info(
            f"Booking {booking.id} confirmed on link {config.link_id} for user "
            f"{assigned_user_id} at {request.start.isoformat()}"
        )
        return BookingOutcome(
            booking=booking,
            assigned_user_id=assigned_user_id,
            degraded=side_effect_status.degraded,
            redirect_url=config.redirect_url,
            confirmation_message=config.confirmation_message,
        )

    def _validate(self, config, request: BookingRequest, schedule_tz):
        if timezone.is_naive(request.start) or timezone.is_naive(request.end):
            raise BookingValidationError(
                "start and end must include a UTC offset",
                errors={"start": ["Timezone offset required"]},
            )

        if request.end - request.start != timedelta(minutes=config.duration):
            raise BookingValidationError(
                f"Bookings on this link last exactly {config.duration} minutes",
                errors={"end": [f"Must be {config.duration} minutes after start"]},
            )

        now = self._check_lead_time(config, request)

        if config.is_one_off and config.is_expired:
            raise LinkExpired()

        if config.availability_window and request.start > now + timedelta(
            days=config.availability_window
        ):
            raise BookingValidationError(
                f"Bookings can be made at most {config.availability_window} days ahead",
                errors={"start": ["Outside the booking window"]},
            )

        if not self.generator.is_candidate_slot(
            config, schedule_tz, request.start, request.end
        ):
            raise BookingValidationError(
                "The requested time is not an available start time for this link",
                errors={"start": ["Not an available start time"]},
            )

        self._check_caps(config, request.start, schedule_tz)

    @staticmethod
    def _assignees(config):
        # The owner is locked too because it is the assignee of last resort
        return list(dict.fromkeys(config.member_ids + (config.owner_id,)))

    def _check_lead_time(self, config, request: BookingRequest):
        """Reject slots starting sooner than the link's lead time; returns now."""
        now = self.clock()
        if request.start - now < timedelta(minutes=config.lead_time):
            raise LeadTimeViolation(config.lead_time)
        return now

    def _check_caps(self, config, start, schedule_tz):
        for period, limit in config.booking_caps.items():
            period_start, period_end = period_bounds(start, period, schedule_tz)
            count = self.storage.count_bookings(config.link_id, period_start, period_end)
            if count >= limit:
                logger.info(
                    f"Link {config.link_id} reached its {period} cap ({count}/{limit})"
                )
                raise CapacityExceeded(period, limit)
