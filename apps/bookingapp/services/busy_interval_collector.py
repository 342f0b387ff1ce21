# apps/bookingapp/services/busy_interval_collector.py
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

import pytz
from django.utils.dateparse import parse_date, parse_datetime

from ..domain import BusyInterval
from ..utils.date_utils import local_midnight

logger = logging.getLogger(__name__)


def _parse_block_value(value, tz, is_end=False, all_day=False) -> Optional[datetime]:
    """
    Turn one startDate/endDate value of a time block into an aware instant.

    Naive values are read in the owner's timezone. Date-only values (and any
    value of an all-day block) snap to local midnight; for the end of a block
    that means the midnight after the date.
    """
    parsed_date = None
    parsed = None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed_date = value
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value)
            if parsed is None:
                parsed_date = parse_date(value)
        except ValueError:
            return None
    else:
        return None

    if parsed is not None and all_day:
        parsed_date = (parsed if parsed.tzinfo is None else parsed.astimezone(tz)).date()
        parsed = None

    if parsed_date is not None:
        if is_end:
            parsed_date += timedelta(days=1)
        return local_midnight(tz, parsed_date)

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = tz.localize(parsed)
    return parsed


def parse_time_block(block, owner_id: int, tz) -> Optional[BusyInterval]:
    """BusyInterval for a declared time block, or None when it is unusable."""
    if not isinstance(block, dict):
        return None
    start_value = block.get("startDate")
    end_value = block.get("endDate")
    if not start_value or not end_value:
        return None

    all_day = bool(block.get("allDay", False))
    start = _parse_block_value(start_value, tz, all_day=all_day)
    end = _parse_block_value(end_value, tz, is_end=True, all_day=all_day)
    if start is None or end is None or end <= start:
        return None
    return BusyInterval(
        start=start.astimezone(pytz.UTC),
        end=end.astimezone(pytz.UTC),
        owner_id=owner_id,
        source="time_block",
    )


class BusyIntervalCollector:
    """
    Gathers every commitment of a set of users over a time range.

    Sources are synced calendar events, manually declared time blocks and
    confirmed bookings. Time blocks are free-form JSON, so a block with a
    missing or unparsable date is dropped with a warning instead of failing
    the whole computation.
    """

    def __init__(self, storage):
        self.storage = storage

    def collect(
        self, user_ids: Iterable[int], start: datetime, end: datetime, tz=pytz.UTC
    ) -> Dict[int, List[BusyInterval]]:
        """
        Busy intervals overlapping ``[start, end)`` grouped by user.

        Args:
            user_ids: Users to collect for
            start: Range start (aware)
            end: Range end (aware, exclusive)
            tz: Timezone naive or date-only time blocks are read in

        Returns:
            Mapping of user id to its intervals sorted by start; every
            requested user has an entry
        """
        user_ids = list(dict.fromkeys(user_ids))
        busy = defaultdict(list)

        for interval in self.storage.get_calendar_intervals(user_ids, start, end):
            busy[interval.owner_id].append(interval)
        for interval in self.storage.get_booking_intervals(user_ids, start, end):
            busy[interval.owner_id].append(interval)

        for owner_id, blocks in self.storage.get_time_blocks(user_ids).items():
            if not isinstance(blocks, list):
                logger.warning(f"Ignoring time blocks of user {owner_id}: not a list")
                continue
            for block in blocks:
                interval = parse_time_block(block, owner_id, tz)
                if interval is None:
                    logger.warning(f"Dropping malformed time block of user {owner_id}: {block!r}")
                    continue
                if interval.start < end and start < interval.end:
                    busy[owner_id].append(interval)

        return {
            user_id: sorted(busy.get(user_id, []), key=lambda i: (i.start, i.end))
            for user_id in user_ids
        }
