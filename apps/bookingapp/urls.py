# apps/bookingapp/urls.py
from django.urls import path

from apps.bookingapp.views import LinkAvailabilityView, LinkBookingView

urlpatterns = [
    path(
        "links/<slug:slug>/availability/",
        LinkAvailabilityView.as_view(),
        name="link-availability",
    ),
    path(
        "links/<slug:slug>/bookings/",
        LinkBookingView.as_view(),
        name="link-bookings",
    ),
]
