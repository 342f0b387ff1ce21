# apps/bookingapp/services/conflict_filter.py
from datetime import timedelta
from typing import Dict, Iterable, Iterator, List, Tuple

from ..domain import BusyInterval, CandidateSlot


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Half-open intervals [a_start, a_end) and [b_start, b_end) intersect."""
    return a_start < b_end and b_start < a_end


class ConflictFilter:
    """
    Removes candidate slots that collide with busy time.

    Buffers pad both sides of the comparison: the slot is widened to
    ``[start - buffer_before, end + buffer_after)`` and so is every busy
    interval, which keeps two bookings of the same person from ending up with
    overlapping buffered intervals.
    """

    def __init__(self, buffer_before: int = 0, buffer_after: int = 0):
        self.before = timedelta(minutes=buffer_before)
        self.after = timedelta(minutes=buffer_after)

    @classmethod
    def for_link(cls, config):
        return cls(config.buffer_before, config.buffer_after)

    def search_window(self, start, end) -> Tuple:
        """Range to collect busy intervals over so every possible conflict is seen."""
        return start - self.before - self.after, end + self.after + self.before

    def conflicts(self, slot: CandidateSlot, interval: BusyInterval) -> bool:
        return intervals_overlap(
            slot.start - self.before,
            slot.end + self.after,
            interval.start - self.before,
            interval.end + self.after,
        )

    def is_member_free(self, slot: CandidateSlot, intervals: Iterable[BusyInterval]) -> bool:
        """Assignment-time check: one member's intervals only."""
        return not any(self.conflicts(slot, interval) for interval in intervals)

    def free_members(
        self, slot: CandidateSlot, busy_by_member: Dict[int, List[BusyInterval]], member_ids
    ) -> List[int]:
        """Members (in the given order) with no conflict at `slot`."""
        return [
            member_id
            for member_id in member_ids
            if self.is_member_free(slot, busy_by_member.get(member_id, ()))
        ]

    def filter_common(
        self,
        slots: Iterable[CandidateSlot],
        busy_by_member: Dict[int, List[BusyInterval]],
        member_ids,
    ) -> Iterator[CandidateSlot]:
        """
        Slots every member is free for.

        For an individual link `member_ids` is just the owner.
        """
        member_ids = list(member_ids)
        for slot in slots:
            if all(
                self.is_member_free(slot, busy_by_member.get(member_id, ()))
                for member_id in member_ids
            ):
                yield slot
