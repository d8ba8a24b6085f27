"""
Recall date parsing.

NHTSA has shipped the recall "ReportReceivedDate" in a few encodings over
the years:

    /Date(1365004652303-0500)/   epoch millis + zone offset (legacy webapi)
    1365004652303-0500           same, without the wrapper
    04/04/2013                   day/month/year literal

parse_timestamp() accepts all of them and never raises. Anything it can't
make sense of comes back as the current date/time.
"""

import logging
import re
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

# 10 digits of epoch seconds, 3 digits of millis, signed HHMM offset
_EPOCH_MILLIS_RE = re.compile(r"(\d{10})(\d{3})([+-])(\d{2})(\d{2})")

_DAY_MONTH_YEAR = "%d/%m/%Y"


def _parse_epoch_millis(raw: str) -> datetime:
    match = _EPOCH_MILLIS_RE.search(raw)
    if not match:
        raise ValueError(f"no epoch timestamp in {raw!r}")

    seconds, millis, sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes))
    if sign == "-":
        offset = -offset

    tz = timezone(offset)  # ValueError if the offset is >= 24h
    return datetime.fromtimestamp(int(seconds), tz=tz) + timedelta(milliseconds=int(millis))


def parse_timestamp(raw: str) -> datetime:
    """
    Parse a recall received-date string.

    Args:
        raw: Date string as returned by the recalls API

    Returns:
        Parsed datetime, or datetime.now() if the string is unrecognised.
    """
    if not isinstance(raw, str):
        return datetime.now()

    try:
        return _parse_epoch_millis(raw)
    except (ValueError, OverflowError, OSError):
        pass

    try:
        return datetime.strptime(raw.strip(), _DAY_MONTH_YEAR)
    except ValueError:
        logger.debug(f"Unrecognised recall date {raw!r}, using current time")
        return datetime.now()
