"""
Booking app views for Smart Scheduler
Public endpoints guests use to list free slots of a booking link and book one
"""

import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.bookingapp.domain import BookingRequest
from apps.bookingapp.serializers import (
    AvailabilityQuerySerializer,
    BookingCreateSerializer,
    BookingOutcomeSerializer,
    SlotSerializer,
)
from apps.bookingapp.services import build_availability_service, build_booking_service

logger = logging.getLogger(__name__)


class LinkAvailabilityView(APIView):
    """Free slots of a booking link"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_scope = "availability"

    @swagger_auto_schema(
        operation_summary="List available slots",
        manual_parameters=[
            openapi.Parameter("startDate", openapi.IN_QUERY, type=openapi.TYPE_STRING, format="date", required=True),
            openapi.Parameter("endDate", openapi.IN_QUERY, type=openapi.TYPE_STRING, format="date"),
            openapi.Parameter("timezone", openapi.IN_QUERY, type=openapi.TYPE_STRING, description="IANA timezone name"),
        ],
        responses={200: SlotSerializer(many=True)},
    )
    def get(self, request, slug):
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        slots = build_availability_service().get_available_slots_for_slug(
            slug,
            start_date=query.validated_data["startDate"],
            end_date=query.validated_data.get("endDate"),
            timezone_name=query.validated_data.get("timezone") or None,
        )
        return Response([slot.to_dict() for slot in slots])


class LinkBookingView(APIView):
    """Book a slot on a booking link"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_scope = "booking"

    @swagger_auto_schema(
        operation_summary="Book a slot",
        request_body=BookingCreateSerializer,
        responses={201: BookingOutcomeSerializer},
    )
    def post(self, request, slug):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = build_booking_service().create_booking_for_slug(
            slug,
            start=data["start"],
            end=data["end"],
            name=data["name"],
            email=data["email"],
            notes=data.get("notes", ""),
        )
        return Response(
            BookingOutcomeSerializer(outcome).data, status=status.HTTP_201_CREATED
        )
