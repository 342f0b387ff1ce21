from apps.bookingapp.storage import DjangoSchedulingStorage

from .availability_service import AvailabilityService
from .booking_service import BookingService


def build_availability_service(**kwargs) -> AvailabilityService:
    return AvailabilityService(DjangoSchedulingStorage(), **kwargs)


def build_booking_service(**kwargs) -> BookingService:
    return BookingService(DjangoSchedulingStorage(), **kwargs)
