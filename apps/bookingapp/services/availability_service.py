# apps/bookingapp/services/availability_service.py
import logging
from datetime import date, timedelta
from typing import List, Optional

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from core.exceptions.custom_exceptions import BookingValidationError
from utils.constants import CACHE_KEY_AVAILABILITY

from ..domain import CandidateSlot
from ..utils.date_utils import local_midnight
from ..utils.timezone_utils import get_timezone, owner_timezone
from .busy_interval_collector import BusyIntervalCollector
from .conflict_filter import ConflictFilter
from .slot_generator import SlotGenerator
from .template_resolver import AvailabilityTemplateResolver

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Read-only availability queries for booking links.

    Runs template resolution, slot generation, busy-interval collection and
    common-availability filtering. Results may be slightly stale (they are
    cached briefly and never locked); booking creation rechecks everything.
    """

    def __init__(
        self,
        storage,
        resolver=None,
        generator=None,
        collector=None,
        clock=timezone.now,
        cache_ttl=None,
    ):
        self.storage = storage
        self.resolver = resolver or AvailabilityTemplateResolver(storage)
        self.generator = generator or SlotGenerator(self.resolver)
        self.collector = collector or BusyIntervalCollector(storage)
        self.clock = clock
        self.cache_ttl = (
            cache_ttl
            if cache_ttl is not None
            else getattr(settings, "AVAILABILITY_CACHE_TTL", 60)
        )

    def get_available_slots_for_slug(self, slug: str, **kwargs) -> List[CandidateSlot]:
        config = self.storage.get_link_config_by_slug(slug)
        return self._available_slots(config, **kwargs)

    def get_available_slots(
        self,
        link_id,
        start_date: date,
        end_date: Optional[date] = None,
        timezone_name: Optional[str] = None,
    ) -> List[CandidateSlot]:
        """
        Bookable slots of a link between two local dates.

        Args:
            link_id: Booking link id
            start_date: First local date of the query
            end_date: Local date after the last one (defaults to
                SCHEDULING_DEFAULT_WINDOW_DAYS after start_date)
            timezone_name: Timezone the dates are read in; defaults to the
                owner's preferred timezone

        Returns:
            Slots ordered by start, as UTC instants. Empty when nothing is free.
        """
        config = self.storage.get_link_config(link_id)
        return self._available_slots(
            config, start_date=start_date, end_date=end_date, timezone_name=timezone_name
        )

    def _available_slots(self, config, start_date, end_date=None, timezone_name=None):
        if config.is_one_off and config.is_expired:
            logger.info(f"Link {config.link_id} is an expired one-off link, no availability")
            return []

        schedule_tz = owner_timezone(self.storage, config.owner_id)
        query_tz = schedule_tz
        if timezone_name:
            query_tz = get_timezone(timezone_name)
            if query_tz is None:
                raise BookingValidationError(
                    f"Unknown timezone: {timezone_name}",
                    errors={"timezone": [f"Unknown timezone: {timezone_name}"]},
                )

        if end_date is None:
            end_date = start_date + timedelta(
                days=getattr(settings, "SCHEDULING_DEFAULT_WINDOW_DAYS", 30)
            )
        self._validate_range(start_date, end_date)

        cache_key = CACHE_KEY_AVAILABILITY.format(
            link_id=config.link_id, start=start_date, end=end_date, timezone=query_tz.zone
        )
        if self.cache_ttl:
            cached_result = cache.get(cache_key)
            if cached_result is not None:
                return cached_result

        window_start = local_midnight(query_tz, start_date)
        window_end = local_midnight(query_tz, end_date)

        # Slots that could never be booked are not offered
        now = self.clock()
        window_start = max(window_start, now + timedelta(minutes=config.lead_time))
        if config.availability_window:
            window_end = min(window_end, now + timedelta(days=config.availability_window))
        if window_end <= window_start:
            return []

        conflict_filter = ConflictFilter.for_link(config)
        member_ids = config.member_ids
        busy = self.collector.collect(
            member_ids,
            *conflict_filter.search_window(window_start, window_end),
            tz=schedule_tz,
        )
        candidates = self.generator.generate(config, schedule_tz, window_start, window_end)
        available = list(conflict_filter.filter_common(candidates, busy, member_ids))

        logger.debug(
            f"Link {config.link_id}: {len(available)} slots between {start_date} and {end_date} ({query_tz.zone})"
        )
        if self.cache_ttl:
            cache.set(cache_key, available, self.cache_ttl)
        return available

    @staticmethod
    def _validate_range(start_date: date, end_date: date):
        if end_date <= start_date:
            raise BookingValidationError(
                "endDate must be after startDate",
                errors={"endDate": ["endDate must be after startDate"]},
            )
        max_days = getattr(settings, "SCHEDULING_MAX_QUERY_DAYS", 62)
        if (end_date - start_date).days > max_days:
            raise BookingValidationError(
                f"A query can cover at most {max_days} days",
                errors={"endDate": [f"A query can cover at most {max_days} days"]},
            )
