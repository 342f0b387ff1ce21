# apps/bookingapp/tests/test_availability_service.py
from datetime import date

from django.core.cache import cache
from django.test import SimpleTestCase

from apps.bookingapp.domain import BusyInterval
from apps.bookingapp.services.availability_service import AvailabilityService
from core.exceptions.custom_exceptions import BookingValidationError, LinkNotFound

from .fakes import InMemorySchedulingStorage, fixed_clock, make_link, utc

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


class AvailabilityServiceTest(SimpleTestCase):
    """Test cases for availability queries"""

    def setUp(self):
        self.link = make_link()
        self.storage = InMemorySchedulingStorage(self.link)
        self.service = self._service()

    def _service(self, clock=None, cache_ttl=0):
        return AvailabilityService(
            self.storage, clock=clock or fixed_clock(), cache_ttl=cache_ttl
        )

    def _starts(self, slots):
        return [slot.start for slot in slots]

    def _add_link(self, **overrides):
        link = make_link(**overrides)
        self.storage.links[link.link_id] = link
        return link

    def test_weekday_link_returns_sixteen_slots(self):
        slots = self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY)

        self.assertEqual(len(slots), 16)
        self.assertEqual(slots[0].to_dict()["start"], "2030-01-07T09:00:00+00:00")
        self.assertEqual(slots[-1].to_dict()["end"], "2030-01-07T17:00:00+00:00")

    def test_busy_interval_removes_overlapping_slot(self):
        self.storage.events.append(
            BusyInterval(utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30), owner_id=1)
        )

        starts = self._starts(self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY))

        self.assertNotIn(utc(2030, 1, 7, 10, 0), starts)
        self.assertIn(utc(2030, 1, 7, 9, 30), starts)
        self.assertIn(utc(2030, 1, 7, 10, 30), starts)
        self.assertEqual(len(starts), 15)

    def test_buffer_before_removes_preceding_slot(self):
        link = self._add_link(buffer_before=15)
        self.storage.events.append(
            BusyInterval(utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30), owner_id=1)
        )

        starts = self._starts(self.service.get_available_slots(link.link_id, MONDAY, TUESDAY))

        self.assertNotIn(utc(2030, 1, 7, 9, 30), starts)
        self.assertNotIn(utc(2030, 1, 7, 10, 0), starts)
        self.assertIn(utc(2030, 1, 7, 9, 0), starts)
        self.assertIn(utc(2030, 1, 7, 11, 0), starts)

    def test_other_users_events_are_ignored(self):
        self.storage.events.append(
            BusyInterval(utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30), owner_id=99)
        )

        self.assertEqual(len(self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY)), 16)

    def test_slots_inside_lead_time_are_not_offered(self):
        service = self._service(clock=fixed_clock(utc(2030, 1, 7, 10, 10)))

        starts = self._starts(service.get_available_slots(self.link.link_id, MONDAY, TUESDAY))

        self.assertEqual(starts[0], utc(2030, 1, 7, 11, 30))

    def test_slots_beyond_availability_window_are_not_offered(self):
        link = self._add_link(availability_window=1)

        starts = self._starts(self.service.get_available_slots(link.link_id, MONDAY, TUESDAY))

        self.assertEqual(starts[-1], utc(2030, 1, 7, 11, 30))
        self.assertEqual(len(starts), 6)

    def test_expired_one_off_link_has_no_availability(self):
        link = self._add_link(is_one_off=True, is_expired=True)

        self.assertEqual(self.service.get_available_slots(link.link_id, MONDAY, TUESDAY), [])

    def test_inactive_link_is_not_found(self):
        link = self._add_link(is_active=False)

        with self.assertRaises(LinkNotFound):
            self.service.get_available_slots(link.link_id, MONDAY, TUESDAY)

    def test_default_range_when_end_date_missing(self):
        slots = self.service.get_available_slots(self.link.link_id, MONDAY)

        days = {slot.start.date() for slot in slots}
        self.assertGreater(len(days), 1)
        self.assertEqual(min(days), MONDAY)

    def test_owner_preferred_timezone_is_used(self):
        self.storage.timezones[1] = "America/New_York"

        slots = self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY)

        self.assertEqual(len(slots), 16)
        self.assertEqual(slots[0].start, utc(2030, 1, 7, 14, 0))

    def test_requested_timezone_defines_the_date_window(self):
        slots = self.service.get_available_slots(
            self.link.link_id, MONDAY, TUESDAY, timezone_name="Asia/Tokyo"
        )

        # Tokyo's Monday ends at 15:00 UTC, so only the morning UTC slots fall inside
        self.assertEqual(slots[0].start, utc(2030, 1, 7, 9, 0))
        self.assertEqual(slots[-1].start, utc(2030, 1, 7, 14, 30))

    def test_unknown_timezone_is_rejected(self):
        with self.assertRaises(BookingValidationError):
            self.service.get_available_slots(
                self.link.link_id, MONDAY, TUESDAY, timezone_name="Mars/Olympus"
            )

    def test_range_must_be_positive_and_bounded(self):
        with self.assertRaises(BookingValidationError):
            self.service.get_available_slots(self.link.link_id, TUESDAY, MONDAY)
        with self.assertRaises(BookingValidationError):
            self.service.get_available_slots(self.link.link_id, MONDAY, date(2030, 6, 1))

    def test_time_blocks_are_busy_and_malformed_ones_dropped(self):
        self.storage.time_blocks[1] = [
            {"startDate": "2030-01-07T13:00:00Z", "endDate": "2030-01-07T14:00:00Z", "title": "Gym"},
            {"startDate": "not a date", "endDate": "2030-01-07T15:00:00Z"},
            {"title": "missing dates"},
        ]

        with self.assertLogs("apps.bookingapp.services.busy_interval_collector", level="WARNING") as logs:
            starts = self._starts(
                self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY)
            )

        self.assertEqual(len(logs.records), 2)
        self.assertNotIn(utc(2030, 1, 7, 13, 0), starts)
        self.assertNotIn(utc(2030, 1, 7, 13, 30), starts)
        self.assertEqual(len(starts), 14)

    def test_all_day_time_block_blocks_the_whole_day(self):
        self.storage.time_blocks[1] = [
            {"startDate": "2030-01-07", "endDate": "2030-01-07", "allDay": True}
        ]

        self.assertEqual(self.service.get_available_slots(self.link.link_id, MONDAY, TUESDAY), [])

    def test_team_link_needs_every_member_free(self):
        link = self._add_link(is_team_booking=True, team_member_ids=[2, 3])
        self.storage.events += [
            BusyInterval(utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30), owner_id=3),
            # The owner is not a member of this team
            BusyInterval(utc(2030, 1, 7, 11, 0), utc(2030, 1, 7, 11, 30), owner_id=1),
        ]

        starts = self._starts(self.service.get_available_slots(link.link_id, MONDAY, TUESDAY))

        self.assertNotIn(utc(2030, 1, 7, 10, 0), starts)
        self.assertIn(utc(2030, 1, 7, 11, 0), starts)

    def test_team_link_without_members_uses_owner(self):
        link = self._add_link(is_team_booking=True, team_member_ids=[])
        self.storage.events.append(
            BusyInterval(utc(2030, 1, 7, 11, 0), utc(2030, 1, 7, 11, 30), owner_id=1)
        )

        starts = self._starts(self.service.get_available_slots(link.link_id, MONDAY, TUESDAY))

        self.assertNotIn(utc(2030, 1, 7, 11, 0), starts)

    def test_results_are_cached(self):
        cache.clear()
        service = self._service(cache_ttl=60)
        first = service.get_available_slots(self.link.link_id, MONDAY, TUESDAY)
        self.storage.events.append(
            BusyInterval(utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30), owner_id=1)
        )

        self.assertEqual(service.get_available_slots(self.link.link_id, MONDAY, TUESDAY), first)
        cache.clear()
