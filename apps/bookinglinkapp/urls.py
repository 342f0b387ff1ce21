# apps/bookinglinkapp/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.bookinglinkapp.views import DateOverrideViewSet

router = DefaultRouter()
router.register(r"date-overrides", DateOverrideViewSet, basename="date-override")

urlpatterns = [
    path("", include(router.urls)),
]
