"""Calendar-date manipulation utilities"""

import calendar
from datetime import date, datetime
from dateutil.relativedelta import relativedelta


def as_calendar_date(value: date) -> date:
    """Drop any time-of-day component, keeping the calendar date"""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_in_month(year: int, month: int, day: int) -> date:
    """Build a date, clamping the day to the last valid day of the month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def add_months(from_date: date, months: int) -> date:
    """Shift by calendar months, keeping day-of-month (clamped to month end)"""
    return from_date + relativedelta(months=months)


def month_start(value: date) -> date:
    """First day of the month containing value"""
    return value.replace(day=1)


def month_end(value: date) -> date:
    """Last day of the month containing value"""
    return day_in_month(value.year, value.month, 31)
