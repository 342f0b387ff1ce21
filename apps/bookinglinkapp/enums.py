from django.db import models
from django.utils.translation import gettext_lazy as _


class AssignmentMethod(models.TextChoices):
    """How a team link picks the member who receives a booking"""

    POOLED = "pooled", _("Pooled (first available)")
    ROUND_ROBIN = "round-robin", _("Round robin (fewest bookings)")
    SPECIFIC = "specific", _("Specific member")


class RoundRobinScope(models.TextChoices):
    """Which bookings round-robin counts when balancing members"""

    LINK = "link", _("This link only")
    OWNER_TEAM_LINKS = "owner_team_links", _("All team links of the owner")


class DayOfWeek(models.IntegerChoices):
    """Day of week (0=Sunday, 6=Saturday)"""

    SUNDAY = 0, _("Sunday")
    MONDAY = 1, _("Monday")
    TUESDAY = 2, _("Tuesday")
    WEDNESDAY = 3, _("Wednesday")
    THURSDAY = 4, _("Thursday")
    FRIDAY = 5, _("Friday")
    SATURDAY = 6, _("Saturday")
