# apps/bookingapp/utils/date_utils.py
from datetime import datetime, time, timedelta

import pytz

from utils.constants import PERIOD_DAY, PERIOD_MONTH, PERIOD_WEEK


def get_date_range(start_date, end_date):
    """
    Get list of all dates in the half-open range [start_date, end_date)

    Args:
        start_date: First date
        end_date: Date after the last one

    Returns:
        List of dates
    """
    return [
        start_date + timedelta(days=i) for i in range((end_date - start_date).days)
    ]


def get_week_start(date):
    """Sunday on or before `date`"""
    # weekday(): 0 = Monday, 6 = Sunday
    return date - timedelta(days=(date.weekday() + 1) % 7)


def localize_wall_time(tz, date, wall_time):
    """
    Aware instant of a wall-clock time on a local date.

    Returns None when the wall-clock time does not exist (spring forward) or
    happens twice (fall back) in `tz`.
    """
    naive = datetime.combine(date, wall_time)
    try:
        return tz.localize(naive, is_dst=None)
    except (pytz.NonExistentTimeError, pytz.AmbiguousTimeError):
        return None


def local_midnight(tz, date):
    """Start of a local date as an aware instant (never fails on DST days)"""
    return tz.normalize(tz.localize(datetime.combine(date, time.min)))


def period_bounds(moment, period, tz):
    """
    UTC bounds of the local day, Sunday-Saturday week or month containing `moment`

    Args:
        moment: Aware datetime
        period: "day", "week" or "month"
        tz: pytz timezone the period is counted in

    Returns:
        (start, end) aware UTC datetimes, end exclusive
    """
    local_date = moment.astimezone(tz).date()

    if period == PERIOD_DAY:
        first, after = local_date, local_date + timedelta(days=1)
    elif period == PERIOD_WEEK:
        first = get_week_start(local_date)
        after = first + timedelta(days=7)
    elif period == PERIOD_MONTH:
        first = local_date.replace(day=1)
        after = (first + timedelta(days=32)).replace(day=1)
    else:
        raise ValueError(f"Unknown period: {period}")

    return (
        local_midnight(tz, first).astimezone(pytz.UTC),
        local_midnight(tz, after).astimezone(pytz.UTC),
    )
