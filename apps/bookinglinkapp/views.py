"""
Booking link app views for Smart Scheduler
Owner-facing management of date overrides
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, status, viewsets
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response

from apps.bookinglinkapp.filters import DateOverrideFilter
from apps.bookinglinkapp.models import DateOverride
from apps.bookinglinkapp.permissions import IsOwner
from apps.bookinglinkapp.serializers import DateOverrideSerializer

logger = logging.getLogger(__name__)


class DateOverrideViewSet(viewsets.ModelViewSet):
    """
    CRUD for the authenticated user's date overrides.

    Creating an override for a date that already has one updates that
    override instead of failing.
    """

    serializer_class = DateOverrideSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwner]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = DateOverrideFilter
    ordering_fields = ["date", "created_at"]
    ordering = ["date"]

    def get_queryset(self):
        return DateOverride.objects.filter(owner_id=self.request.user.pk)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        override, created = DateOverride.objects.update_or_create(
            owner_id=request.user.pk,
            date=serializer.validated_data["date"],
            defaults={
                key: value
                for key, value in serializer.validated_data.items()
                if key != "date"
            },
        )

        logger.info(
            f"Date override {override.date} {'created' if created else 'updated'} "
            f"for user {request.user.pk}"
        )
        return Response(
            self.get_serializer(override).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def perform_update(self, serializer):
        serializer.save(owner_id=self.request.user.pk)
