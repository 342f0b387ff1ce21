# apps/bookinglinkapp/tests/test_views.py
import datetime

from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.bookinglinkapp.models import DateOverride


class DateOverrideViewSetTest(TestCase):
    """Test cases for managing date overrides"""

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="owner", password="password123")
        self.other = User.objects.create_user(username="other", password="password123")
        self.client.force_authenticate(user=self.user)
        self.list_url = reverse("date-override-list")

    def _override(self, owner, day, **fields):
        return DateOverride.objects.create(owner_id=owner.pk, date=day, **fields)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_day_off(self):
        response = self.client.post(
            self.list_url, {"date": "2030-01-07", "is_available": False, "label": "Holiday"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        override = DateOverride.objects.get()
        self.assertEqual(override.owner_id, self.user.pk)
        self.assertFalse(override.is_available)
        self.assertIsNone(override.start_time)

    def test_create_special_hours(self):
        response = self.client.post(
            self.list_url,
            {"date": "2030-01-12", "is_available": True, "start_time": "10:00", "end_time": "13:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["start_time"], "10:00:00")
        rule = DateOverride.objects.get().to_rule()
        self.assertEqual(rule.end, datetime.time(13, 0))

    def test_same_date_is_updated_in_place(self):
        self._override(self.user, datetime.date(2030, 1, 7), is_available=False)

        response = self.client.post(
            self.list_url,
            {"date": "2030-01-07", "is_available": True, "start_time": "09:00", "end_time": "11:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(DateOverride.objects.count(), 1)
        self.assertTrue(DateOverride.objects.get().is_available)

    def test_hours_need_both_ends(self):
        response = self.client.post(
            self.list_url,
            {"date": "2030-01-07", "is_available": True, "start_time": "09:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation_error")

    def test_hours_must_be_ordered(self):
        response = self.client.post(
            self.list_url,
            {"date": "2030-01-07", "is_available": True, "start_time": "12:00", "end_time": "09:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("end_time", response.data["errors"])

    def test_list_only_shows_own_overrides(self):
        self._override(self.user, datetime.date(2030, 1, 7))
        self._override(self.other, datetime.date(2030, 1, 8))

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["date"], "2030-01-07")

    def test_filter_by_date_range(self):
        for day in (1, 10, 20):
            self._override(self.user, datetime.date(2030, 1, day))

        response = self.client.get(self.list_url, {"start_date": "2030-01-05", "end_date": "2030-01-15"})

        self.assertEqual([row["date"] for row in response.data["results"]], ["2030-01-10"])

    def test_cannot_touch_other_users_override(self):
        override = self._override(self.other, datetime.date(2030, 1, 8))
        url = reverse("date-override-detail", kwargs={"pk": override.pk})

        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(DateOverride.objects.filter(pk=override.pk).exists())

    def test_partial_update_to_unavailable_clears_hours(self):
        override = self._override(
            self.user,
            datetime.date(2030, 1, 7),
            is_available=True,
            start_time=datetime.time(9, 0),
            end_time=datetime.time(11, 0),
        )
        url = reverse("date-override-detail", kwargs={"pk": override.pk})

        response = self.client.patch(url, {"is_available": False}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        override.refresh_from_db()
        self.assertFalse(override.is_available)
        self.assertIsNone(override.start_time)

    def test_update_cannot_move_onto_an_existing_date(self):
        self._override(self.user, datetime.date(2030, 1, 7), label="Holiday")
        override = self._override(self.user, datetime.date(2030, 1, 8))
        url = reverse("date-override-detail", kwargs={"pk": override.pk})

        response = self.client.patch(url, {"date": "2030-01-07"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("date", response.data["errors"])
        override.refresh_from_db()
        self.assertEqual(override.date, datetime.date(2030, 1, 8))
        self.assertEqual(DateOverride.objects.filter(owner_id=self.user.pk).count(), 2)

    def test_update_can_move_onto_a_date_only_another_user_has(self):
        self._override(self.other, datetime.date(2030, 1, 7))
        override = self._override(self.user, datetime.date(2030, 1, 8))
        url = reverse("date-override-detail", kwargs={"pk": override.pk})

        response = self.client.patch(url, {"date": "2030-01-07"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        override.refresh_from_db()
        self.assertEqual(override.date, datetime.date(2030, 1, 7))

    def test_delete(self):
        override = self._override(self.user, datetime.date(2030, 1, 7))
        url = reverse("date-override-detail", kwargs={"pk": override.pk})

        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DateOverride.objects.exists())
