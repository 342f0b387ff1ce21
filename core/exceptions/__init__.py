"""
Smart Scheduler – centralised custom exceptions.

Import these from `core.exceptions` across the project instead of redefining
ad-hoc `Exception` subclasses in each app.
"""

from __future__ import annotations


class SchedulerBaseException(Exception):
    """Base class for all custom exceptions in the Smart Scheduler backend.

    Catch this (or a concrete subclass) in views / tasks when you want to
    convert internal errors into HTTP responses without leaking implementation
    details.
    """


class ConfigurationError(SchedulerBaseException):
    """Raised when stored scheduling configuration is malformed.

    Typical scenarios:
    * A weekly availability template is missing a weekday or has close <= open.
    * A team member id list contains something other than positive integers.
    * A dotted backend path in settings cannot be imported.

    Raised while a BookingLink row is turned into a `BookingLinkConfig`, so a
    bad row is rejected once instead of at every read site.
    """


__all__ = [
    "SchedulerBaseException",
    "ConfigurationError",
]
