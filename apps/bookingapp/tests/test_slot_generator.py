# apps/bookingapp/tests/test_slot_generator.py
from datetime import date, datetime, timedelta

import pytz
from django.test import SimpleTestCase

from apps.bookingapp.services.slot_generator import SlotGenerator
from apps.bookingapp.services.template_resolver import AvailabilityTemplateResolver
from apps.bookinglinkapp.config import WeeklyTemplate

from .fakes import InMemorySchedulingStorage, make_link, utc

NEW_YORK = pytz.timezone("America/New_York")


class SlotGeneratorTest(SimpleTestCase):
    """Test cases for candidate slot generation"""

    def setUp(self):
        self.link = make_link()
        self.storage = InMemorySchedulingStorage(self.link)
        self.generator = SlotGenerator(AvailabilityTemplateResolver(self.storage))

    def _slots(self, link, tz, start, end):
        return list(self.generator.generate(link, tz, start, end))

    def test_weekday_business_hours_give_sixteen_slots(self):
        slots = self._slots(self.link, pytz.UTC, utc(2030, 1, 7), utc(2030, 1, 8))

        self.assertEqual(len(slots), 16)
        self.assertEqual((slots[0].start, slots[0].end), (utc(2030, 1, 7, 9, 0), utc(2030, 1, 7, 9, 30)))
        self.assertEqual(
            (slots[-1].start, slots[-1].end), (utc(2030, 1, 7, 16, 30), utc(2030, 1, 7, 17, 0))
        )

    def test_weekend_has_no_slots(self):
        self.assertEqual(self._slots(self.link, pytz.UTC, utc(2030, 1, 5), utc(2030, 1, 7)), [])

    def test_slot_must_end_before_closing(self):
        link = make_link(duration=45)

        slots = self._slots(link, pytz.UTC, utc(2030, 1, 7), utc(2030, 1, 8))

        self.assertEqual(len(slots), 15)
        self.assertEqual(slots[-1].start, utc(2030, 1, 7, 16, 0))
        self.assertEqual(slots[-1].end, utc(2030, 1, 7, 16, 45))

    def test_duration_and_alignment_hold_for_every_slot(self):
        link = make_link(duration=50, slot_increment=20)

        slots = self._slots(link, NEW_YORK, utc(2030, 3, 4), utc(2030, 3, 16))

        self.assertTrue(slots)
        for slot in slots:
            self.assertEqual(slot.end - slot.start, timedelta(minutes=50))
            local = slot.start.astimezone(NEW_YORK)
            minutes_from_open = (local.hour * 60 + local.minute) - 9 * 60
            self.assertEqual(minutes_from_open % 20, 0)

    def test_local_days_follow_target_timezone(self):
        slots = self._slots(
            self.link,
            NEW_YORK,
            NEW_YORK.localize(datetime(2030, 1, 7)),
            NEW_YORK.localize(datetime(2030, 1, 8)),
        )

        self.assertEqual(len(slots), 16)
        # 09:00 EST
        self.assertEqual(slots[0].start, utc(2030, 1, 7, 14, 0))

    def test_offset_is_computed_per_slot_across_dst_change(self):
        # Friday before and Monday after the 2030-03-10 spring-forward
        before = self._slots(self.link, NEW_YORK, utc(2030, 3, 8), utc(2030, 3, 9))
        after = self._slots(self.link, NEW_YORK, utc(2030, 3, 11, 4), utc(2030, 3, 12, 4))

        self.assertEqual(before[0].start, utc(2030, 3, 8, 14, 0))
        self.assertEqual(after[0].start, utc(2030, 3, 11, 13, 0))

    def test_spring_forward_gap_is_skipped(self):
        link = make_link(
            template=WeeklyTemplate.from_json({"0": {"enabled": True, "start": "01:00", "end": "04:00"}})
        )

        slots = list(self.generator.slots_for_date(link, NEW_YORK, date(2030, 3, 10)))

        self.assertEqual(
            [slot.start for slot in slots],
            [utc(2030, 3, 10, 6, 0), utc(2030, 3, 10, 7, 0), utc(2030, 3, 10, 7, 30)],
        )

    def test_fall_back_repeated_hour_is_skipped(self):
        link = make_link(
            template=WeeklyTemplate.from_json({"0": {"enabled": True, "start": "00:00", "end": "03:00"}})
        )

        slots = list(self.generator.slots_for_date(link, NEW_YORK, date(2030, 11, 3)))

        self.assertEqual(
            [slot.start for slot in slots],
            [utc(2030, 11, 3, 4, 0), utc(2030, 11, 3, 7, 0), utc(2030, 11, 3, 7, 30)],
        )
        for slot in slots:
            self.assertEqual(slot.end - slot.start, timedelta(minutes=30))

    def test_sequence_is_restartable(self):
        sequence = self.generator.generate(self.link, pytz.UTC, utc(2030, 1, 7), utc(2030, 1, 9))

        self.assertEqual(list(sequence), list(sequence))
        self.assertEqual(len(list(sequence)), 32)

    def test_is_candidate_slot(self):
        self.assertTrue(
            self.generator.is_candidate_slot(
                self.link, pytz.UTC, utc(2030, 1, 7, 10, 0), utc(2030, 1, 7, 10, 30)
            )
        )
        # misaligned
        self.assertFalse(
            self.generator.is_candidate_slot(
                self.link, pytz.UTC, utc(2030, 1, 7, 10, 10), utc(2030, 1, 7, 10, 40)
            )
        )
        # closed day
        self.assertFalse(
            self.generator.is_candidate_slot(
                self.link, pytz.UTC, utc(2030, 1, 5, 10, 0), utc(2030, 1, 5, 10, 30)
            )
        )
