"""
Date range resolution for report requests.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from dateutil import parser as date_parser

from report_config import DateConfiguration

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'


MAX_DAYS = 2 ** 31 - 1

# Two defaults that differ in year, month and day; a value that only parses the same
# against both names all three itself.
_PROBE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_days(value: Optional[str]) -> int:
    """Parse the trailing-days setting, falling back to 0 for junk and out-of-range counts."""
    try:
        days = int(value)
    except (TypeError, ValueError):
        return 0
    if abs(days) > MAX_DAYS:
        return 0
    return days


def parse_config_date(value: Optional[str]) -> Optional[date]:
    """Leniently parse a configured date. Returns None for blank, partial or unparsable values."""
    if not value or not value.strip():
        return None
    try:
        first, second = (date_parser.parse(value, default=default) for default in _PROBE_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    if first.date() == datetime.min.date():
        return None
    return first.date()


def default_window(today: date, number_of_days: int):
    """Trailing window ending yesterday, or just today when number_of_days is 0."""
    try:
        start_date = today - timedelta(days=number_of_days)
    except OverflowError:
        logger.debug(f"Trailing {number_of_days} day(s) is outside the calendar; using today")
        return today, today
    end_date = today if number_of_days == 0 else today - timedelta(days=1)
    return start_date, end_date


def resolve_date_ranges(date_config: DateConfiguration, today: Optional[date] = None) -> List[Dict[str, str]]:
    """Work out the date range for a report.

    The default window covers the trailing number_of_days and ends yesterday,
    or is just today when no trailing days are configured. An explicit
    start_date/end_date pair replaces it only when both parse and start <= end.

    Returns a single-element list in the shape the Reporting API expects.
    """
    today = today or date.today()
    number_of_days = parse_days(date_config.number_of_days)

    start_date, end_date = default_window(today, number_of_days)

    configured_start = parse_config_date(date_config.start_date)
    configured_end = parse_config_date(date_config.end_date)
    if configured_start and configured_end and configured_start <= configured_end:
        start_date = configured_start
        end_date = configured_end
    elif date_config.start_date or date_config.end_date:
        logger.debug(f"Ignoring configured dates {date_config.start_date!r} - {date_config.end_date!r}; "
                     f"using trailing {number_of_days} day(s)")

    return [{
        'startDate': start_date.strftime(DATE_FORMAT),
        'endDate': end_date.strftime(DATE_FORMAT),
    }]
