# apps/bookingapp/utils/timezone_utils.py
import logging

import pytz
from django.conf import settings

logger = logging.getLogger(__name__)


def get_timezone(name):
    """pytz timezone for `name`, or None when the name is unknown"""
    if not name:
        return None
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return None


def default_timezone():
    return get_timezone(getattr(settings, "SCHEDULING_DEFAULT_TIMEZONE", "UTC")) or pytz.UTC


def owner_timezone(storage, owner_id):
    """
    Timezone the owner's weekly hours and date overrides are written in.

    Falls back to the configured default when the owner has no preference or
    a stored name is not a valid timezone.
    """
    name = storage.get_owner_timezone(owner_id)
    tz = get_timezone(name)
    if tz is None:
        if name:
            logger.warning(f"Owner {owner_id} has an unknown preferred timezone {name!r}")
        return default_timezone()
    return tz
