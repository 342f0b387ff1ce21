# apps/bookingapp/services/assignment_service.py
import logging
from typing import Dict, List

from apps.bookinglinkapp.config import BookingLinkConfig
from apps.bookinglinkapp.enums import AssignmentMethod, RoundRobinScope
from core.exceptions.custom_exceptions import NoMemberAvailable, SlotConflict

from ..domain import BusyInterval, CandidateSlot

logger = logging.getLogger(__name__)


class AssignmentResolver:
    """
    Picks the team member who receives a booking.

    - pooled: first free member in configured order
    - round-robin: free member with the fewest confirmed bookings, lowest id
      on ties. Counts are recomputed on every booking, so manual reassignments
      and cancellations are absorbed without any stored pointer.
    - specific: the configured member, never anyone else
    """

    def __init__(self, storage):
        self.storage = storage

    def resolve(
        self,
        config: BookingLinkConfig,
        slot: CandidateSlot,
        busy_by_member: Dict[int, List[BusyInterval]],
        conflict_filter,
    ) -> int:
        """
        Assignee for `slot`.

        Raises:
            NoMemberAvailable: the policy found nobody eligible
            SlotConflict: the owner fallback is busy too
        """
        if not config.is_team_booking:
            return config.owner_id

        method = config.assignment_method
        if method == AssignmentMethod.SPECIFIC:
            return self._specific(config, slot, busy_by_member, conflict_filter)

        try:
            free = conflict_filter.free_members(slot, busy_by_member, config.member_ids)
            if not free:
                raise NoMemberAvailable()
            if method == AssignmentMethod.ROUND_ROBIN:
                return self._round_robin(config, free)
            return free[0]
        except NoMemberAvailable:
            raise
        except Exception:
            logger.exception(
                f"{method} assignment failed for link {config.link_id}, "
                f"falling back to owner {config.owner_id}"
            )
            return self._owner_fallback(config, slot, busy_by_member, conflict_filter)

    def _specific(self, config, slot, busy_by_member, conflict_filter) -> int:
        member_id = config.specific_member_id or config.member_ids[0]
        if not conflict_filter.is_member_free(slot, busy_by_member.get(member_id, ())):
            logger.info(f"Specific member {member_id} is busy at {slot.start}")
            raise NoMemberAvailable()
        return member_id

    def _round_robin(self, config: BookingLinkConfig, free: List[int]) -> int:
        if config.round_robin_scope == RoundRobinScope.OWNER_TEAM_LINKS:
            link_ids = self.storage.team_link_ids_for_owner(config.owner_id)
            if config.link_id not in link_ids:
                link_ids.append(config.link_id)
        else:
            link_ids = [config.link_id]

        counts = self.storage.count_bookings_by_member(link_ids, free)
        chosen = min(free, key=lambda member_id: (counts.get(member_id, 0), member_id))
        logger.debug(f"Round robin counts for link {config.link_id}: {counts}, chose {chosen}")
        return chosen

    def _owner_fallback(self, config, slot, busy_by_member, conflict_filter) -> int:
        owner_busy = busy_by_member.get(config.owner_id, ())
        if not conflict_filter.is_member_free(slot, owner_busy):
            raise SlotConflict()
        return config.owner_id
