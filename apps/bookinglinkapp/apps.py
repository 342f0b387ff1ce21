from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class BookingLinkAppConfig(AppConfig):
    name = "apps.bookinglinkapp"
    label = "bookinglinkapp"
    verbose_name = _("Booking Links")
