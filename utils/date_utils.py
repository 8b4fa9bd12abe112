# utils/date_utils.py
import calendar
from datetime import date


def get_month_bounds(year, month):
    """
    Get the first and last date of the specified month

    Args:
        year: Year
        month: Month (1-12)

    Returns:
        Tuple of (first_day, last_day)
    """
    _, num_days = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, num_days)


def sunday_based_weekday(day):
    """Day of week with 0=Sunday ... 6=Saturday"""
    return (day.weekday() + 1) % 7


def is_weekend(day):
    """Saturday or Sunday in the local calendar"""
    return day.weekday() >= 5
