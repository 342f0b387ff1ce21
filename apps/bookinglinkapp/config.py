"""
Typed scheduling configuration.

BookingLink rows keep the weekly template and the team member list as JSON.
They are turned into the frozen structures below once, when a link is loaded,
so the engine never has to second-guess the shape of its inputs.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from core.exceptions import ConfigurationError
from utils.constants import PERIOD_DAY, PERIOD_MONTH, PERIOD_WEEK, WEEKDAY_KEYS

from .enums import AssignmentMethod, DayOfWeek, RoundRobinScope

TIME_FORMATS = ("%H:%M", "%H:%M:%S")

DEFAULT_WEEKDAYS = ("1", "2", "3", "4", "5")
DEFAULT_HOURS = {"start": "09:00", "end": "17:00"}


def parse_wall_time(value: Any) -> datetime.time:
    """Parse an "HH:MM" (or "HH:MM:SS") wall-clock value."""
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        for fmt in TIME_FORMATS:
            try:
                return datetime.datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    raise ConfigurationError(f"Invalid wall-clock time: {value!r}")


def weekday_index(date: datetime.date) -> int:
    """Weekday of `date` with 0 = Sunday."""
    return (date.weekday() + 1) % 7


@dataclass(frozen=True)
class DayAvailability:
    """Template entry for one weekday."""

    enabled: bool = False
    start: Optional[datetime.time] = None
    end: Optional[datetime.time] = None

    def __post_init__(self):
        if not self.enabled:
            return
        if self.start is None or self.end is None:
            raise ConfigurationError("An enabled day needs both start and end")
        if self.end <= self.start:
            raise ConfigurationError(
                f"Closing time {self.end} must be after opening time {self.start}"
            )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DayAvailability":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Day entry must be an object, got {data!r}")
        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise ConfigurationError(f"'enabled' must be a boolean, got {enabled!r}")
        if not enabled:
            return cls(enabled=False)
        return cls(
            enabled=True,
            start=parse_wall_time(data.get("start")),
            end=parse_wall_time(data.get("end")),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "start": self.start.strftime("%H:%M") if self.start else None,
            "end": self.end.strftime("%H:%M") if self.end else None,
        }


@dataclass(frozen=True)
class WeeklyTemplate:
    """
    Seven DayAvailability entries indexed by weekday, 0 = Sunday.

    Stored as ``{"0": {"enabled": false}, "1": {"enabled": true, "start":
    "09:00", "end": "17:00"}, ...}``. The compact ``{"days": ["1", ...],
    "hours": {"start": ..., "end": ...}}`` form used by older links is accepted
    too and means the same hours on every listed day.
    """

    days: Tuple[DayAvailability, ...]

    def __post_init__(self):
        if len(self.days) != 7:
            raise ConfigurationError(
                f"A weekly template needs 7 days, got {len(self.days)}"
            )

    @classmethod
    def default(cls) -> "WeeklyTemplate":
        return cls.from_json({"days": list(DEFAULT_WEEKDAYS), "hours": DEFAULT_HOURS})

    @classmethod
    def from_json(cls, data: Any) -> "WeeklyTemplate":
        if data in (None, {}):
            return cls.default()
        if not isinstance(data, Mapping):
            raise ConfigurationError("Availability template must be an object")

        if "days" in data or "hours" in data:
            return cls._from_compact(data)

        unknown = set(map(str, data)) - set(WEEKDAY_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unknown weekday keys in template: {sorted(unknown)}"
            )

        days = []
        for index, key in enumerate(WEEKDAY_KEYS):
            entry = data.get(key, data.get(index))
            if entry is None:
                days.append(DayAvailability(enabled=False))
                continue
            try:
                days.append(DayAvailability.from_json(entry))
            except ConfigurationError as e:
                raise ConfigurationError(f"{DayOfWeek(index).label}: {e}") from e
        return cls(days=tuple(days))

    @classmethod
    def _from_compact(cls, data: Mapping[str, Any]) -> "WeeklyTemplate":
        days = data.get("days", list(DEFAULT_WEEKDAYS))
        hours = data.get("hours", DEFAULT_HOURS)
        if not isinstance(days, (list, tuple)) or not isinstance(hours, Mapping):
            raise ConfigurationError("Compact template needs a days list and hours")
        enabled_days = {str(day) for day in days}
        if not enabled_days <= set(WEEKDAY_KEYS):
            raise ConfigurationError(f"Invalid weekday in {sorted(enabled_days)}")

        start = parse_wall_time(hours.get("start"))
        end = parse_wall_time(hours.get("end"))
        return cls(
            days=tuple(
                DayAvailability(enabled=True, start=start, end=end)
                if key in enabled_days
                else DayAvailability(enabled=False)
                for key in WEEKDAY_KEYS
            )
        )

    def to_json(self) -> Dict[str, Any]:
        return {key: day.to_json() for key, day in zip(WEEKDAY_KEYS, self.days)}

    def for_date(self, date: datetime.date) -> DayAvailability:
        return self.days[weekday_index(date)]


@dataclass(frozen=True)
class DateOverrideRule:
    """A date-specific replacement for the weekly template entry."""

    date: datetime.date
    is_available: bool
    start: Optional[datetime.time] = None
    end: Optional[datetime.time] = None

    def __post_init__(self):
        if (self.start is None) != (self.end is None):
            raise ConfigurationError("Override hours need both start and end")
        if self.start is not None and self.end <= self.start:
            raise ConfigurationError(
                f"Override closing time {self.end} must be after {self.start}"
            )

    @property
    def has_hours(self) -> bool:
        return self.start is not None


def _positive_ids(values: Any, what: str) -> Tuple[int, ...]:
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        raise ConfigurationError(f"{what} must be a list of user ids")
    ids = []
    for value in values:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigurationError(f"{what} contains an invalid user id: {value!r}")
        if value in ids:
            raise ConfigurationError(f"{what} lists user {value} twice")
        ids.append(value)
    return tuple(ids)


@dataclass(frozen=True)
class BookingLinkConfig:
    """Validated, immutable view of a BookingLink used by the engine."""

    link_id: Any
    owner_id: int
    duration: int
    template: WeeklyTemplate = field(default_factory=WeeklyTemplate.default)
    buffer_before: int = 0
    buffer_after: int = 0
    lead_time: int = 60
    slot_increment: int = 30
    availability_window: int = 30
    max_bookings_per_day: int = 0
    max_bookings_per_week: int = 0
    max_bookings_per_month: int = 0
    is_team_booking: bool = False
    team_member_ids: Tuple[int, ...] = ()
    assignment_method: AssignmentMethod = AssignmentMethod.POOLED
    specific_member_id: Optional[int] = None
    round_robin_scope: RoundRobinScope = RoundRobinScope.LINK
    is_one_off: bool = False
    is_expired: bool = False
    is_active: bool = True
    slug: str = ""
    title: str = ""
    auto_create_meeting_link: bool = False
    notify_on_booking: bool = True
    redirect_url: str = ""
    confirmation_message: str = ""

    def __post_init__(self):
        if self.duration <= 0:
            raise ConfigurationError(f"duration must be positive, got {self.duration}")
        if self.slot_increment <= 0:
            raise ConfigurationError(
                f"slot_increment must be positive, got {self.slot_increment}"
            )
        for name in (
            "buffer_before",
            "buffer_after",
            "lead_time",
            "availability_window",
            "max_bookings_per_day",
            "max_bookings_per_week",
            "max_bookings_per_month",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative")

        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(
            self, "team_member_ids", _positive_ids(self.team_member_ids, "team_member_ids")
        )
        try:
            object.__setattr__(
                self, "assignment_method", AssignmentMethod(self.assignment_method)
            )
            object.__setattr__(
                self, "round_robin_scope", RoundRobinScope(self.round_robin_scope)
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if (
            self.specific_member_id is not None
            and self.is_team_booking
            and self.specific_member_id not in self.member_ids
        ):
            raise ConfigurationError(
                f"specific_member_id {self.specific_member_id} is not a team member"
            )

    @property
    def member_ids(self) -> Tuple[int, ...]:
        """Eligible assignees; an individual link or an empty team means the owner."""
        if self.is_team_booking and self.team_member_ids:
            return self.team_member_ids
        return (self.owner_id,)

    @property
    def booking_caps(self) -> Dict[str, int]:
        """Configured (non-zero) caps keyed by period."""
        caps = {
            PERIOD_DAY: self.max_bookings_per_day,
            PERIOD_WEEK: self.max_bookings_per_week,
            PERIOD_MONTH: self.max_bookings_per_month,
        }
        return {period: limit for period, limit in caps.items() if limit}

