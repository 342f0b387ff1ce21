# apps/bookingapp/services/template_resolver.py
import logging
from datetime import date
from typing import Optional

from apps.bookinglinkapp.config import BookingLinkConfig

from ..domain import OpenWindow

logger = logging.getLogger(__name__)


class AvailabilityTemplateResolver:
    """
    Merges a link's weekly template with the owner's date overrides.

    An override for the exact date wins over the template, including closing a
    day the template has open. An available override without its own hours
    keeps the template's hours for that weekday.
    """

    def __init__(self, storage):
        self.storage = storage

    def resolve(self, config: BookingLinkConfig, day: date) -> Optional[OpenWindow]:
        """Local opening hours of `day`, or None when closed."""
        template_day = config.template.for_date(day)
        override = self.storage.get_date_override(config.owner_id, day)

        if override is not None:
            if not override.is_available:
                logger.debug(f"{day} closed by date override for owner {config.owner_id}")
                return None
            if override.has_hours:
                return OpenWindow(date=day, start=override.start, end=override.end)
            if template_day.start is None:
                logger.debug(
                    f"{day} override has no hours and the template has none to fall back to"
                )
                return None
            return OpenWindow(date=day, start=template_day.start, end=template_day.end)

        if not template_day.enabled:
            logger.debug(f"{day} closed in weekly template of link {config.link_id}")
            return None
        return OpenWindow(date=day, start=template_day.start, end=template_day.end)
