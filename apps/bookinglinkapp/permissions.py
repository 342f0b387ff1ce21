# apps/bookinglinkapp/permissions.py
from rest_framework import permissions


class IsOwner(permissions.BasePermission):
    """Only the user a row belongs to (``owner_id``) may access it"""

    def has_object_permission(self, request, view, obj):
        return obj.owner_id == request.user.pk
