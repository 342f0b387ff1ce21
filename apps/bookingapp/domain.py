"""
Value types passed between the availability and booking services.

Everything here is plain data: no ORM, no settings, so the engine can be
exercised against an in-memory storage.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class BusyInterval:
    """A half-open ``[start, end)`` commitment of one user, in UTC."""

    start: datetime.datetime
    end: datetime.datetime
    owner_id: int
    source: str = "event"


@dataclass(frozen=True, order=True)
class CandidateSlot:
    """A bookable ``[start, end)`` pair of aware instants."""

    start: datetime.datetime
    end: datetime.datetime

    def to_dict(self):
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class OpenWindow:
    """A day's local opening hours after overrides are applied."""

    date: datetime.date
    start: datetime.time
    end: datetime.time


@dataclass(frozen=True)
class BookingRequest:
    link_id: Any
    start: datetime.datetime
    end: datetime.datetime
    name: str
    email: str
    notes: str = ""


@dataclass
class BookingOutcome:
    """What the caller gets back from a successful booking."""

    booking: Any
    assigned_user_id: int
    degraded: bool = False
    redirect_url: str = ""
    confirmation_message: str = ""


class BookingAttemptState(str, Enum):
    """Stages of one booking attempt, in order"""

    VALIDATING = "validating"
    AVAILABILITY_RECHECK = "availability_recheck"
    ASSIGNMENT_RESOLUTION = "assignment_resolution"
    PERSISTING = "persisting"
    SIDE_EFFECTS = "side_effects"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


@dataclass
class BookingAttempt:
    """Tracks the stage a booking attempt reached, for logging."""

    request: BookingRequest
    state: BookingAttemptState = BookingAttemptState.VALIDATING
    history: list = field(default_factory=list)
    assigned_user_id: Optional[int] = None

    def advance(self, state: BookingAttemptState):
        self.history.append(self.state)
        self.state = state
