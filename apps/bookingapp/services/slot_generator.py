# apps/bookingapp/services/slot_generator.py
import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

import pytz

from apps.bookinglinkapp.config import BookingLinkConfig

from ..domain import CandidateSlot
from ..utils.date_utils import get_date_range, localize_wall_time

logger = logging.getLogger(__name__)


class CandidateSlotSequence:
    """
    Lazily produced candidate slots over a range of schedule-local dates.

    Iterating again starts over from the first date; nothing is computed until
    iteration begins.
    """

    def __init__(
        self,
        generator: "SlotGenerator",
        config: BookingLinkConfig,
        tz,
        first_day: date,
        after_last_day: date,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None,
    ):
        self.generator = generator
        self.config = config
        self.tz = tz
        self.first_day = first_day
        self.after_last_day = after_last_day
        self.window_start = window_start
        self.window_end = window_end

    def __iter__(self) -> Iterator[CandidateSlot]:
        for day in get_date_range(self.first_day, self.after_last_day):
            for slot in self.generator.slots_for_date(self.config, self.tz, day):
                if self.window_start is not None and slot.start < self.window_start:
                    continue
                if self.window_end is not None and slot.start >= self.window_end:
                    continue
                yield slot


class SlotGenerator:
    """Turns resolved opening hours into fixed-length candidate slots."""

    def __init__(self, resolver):
        self.resolver = resolver

    def slots_for_date(self, config: BookingLinkConfig, tz, day: date):
        """
        Slots of one local date, starting at the opening time and stepping by
        the link's increment while the meeting still ends before closing.

        Each boundary is localized on its own so a DST change inside the range
        uses the right offset. Slots whose wall-clock start or end falls in a
        skipped or repeated hour are left out.
        """
        window = self.resolver.resolve(config, day)
        if window is None:
            return

        duration = timedelta(minutes=config.duration)
        step = timedelta(minutes=config.slot_increment)
        opening = datetime.combine(day, window.start)
        closing = datetime.combine(day, window.end)

        cursor = opening
        while cursor + duration <= closing:
            start = localize_wall_time(tz, day, cursor.time())
            wall_end = cursor + duration
            end = localize_wall_time(tz, wall_end.date(), wall_end.time())
            if start is None or end is None:
                logger.debug(f"Skipping {cursor} in {tz}: wall-clock time shifted by DST")
            else:
                start_utc = start.astimezone(pytz.UTC)
                yield CandidateSlot(start=start_utc, end=start_utc + duration)
            cursor += step

    def generate(
        self,
        config: BookingLinkConfig,
        tz,
        window_start: datetime,
        window_end: datetime,
    ) -> CandidateSlotSequence:
        """All slots starting in ``[window_start, window_end)``, schedule-local days in `tz`."""
        first_day = window_start.astimezone(tz).date()
        last_day = window_end.astimezone(tz).date()
        return CandidateSlotSequence(
            self,
            config,
            tz,
            first_day,
            last_day + timedelta(days=1),
            window_start=window_start,
            window_end=window_end,
        )

    def is_candidate_slot(self, config: BookingLinkConfig, tz, start: datetime, end: datetime) -> bool:
        """Whether ``[start, end)`` is exactly one of the slots generated for its local date."""
        requested = CandidateSlot(start=start.astimezone(pytz.UTC), end=end.astimezone(pytz.UTC))
        day = requested.start.astimezone(tz).date()
        return any(slot == requested for slot in self.slots_for_date(config, tz, day))
