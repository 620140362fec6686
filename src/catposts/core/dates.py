"""PHP-style date formatting and human readable time differences"""

import calendar
from datetime import datetime

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY


def _suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _offset(dt: datetime, colon: bool) -> str:
    delta = dt.utcoffset()
    seconds = int(delta.total_seconds()) if delta else 0
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    return f"{sign}{hours:02d}{':' if colon else ''}{minutes:02d}"


_FORMATTERS = {
    "d": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: calendar.day_abbr[dt.weekday()],
    "j": lambda dt: str(dt.day),
    "l": lambda dt: calendar.day_name[dt.weekday()],
    "N": lambda dt: str(dt.isoweekday()),
    "S": lambda dt: _suffix(dt.day),
    "w": lambda dt: str(dt.isoweekday() % 7),
    "z": lambda dt: str(dt.timetuple().tm_yday - 1),
    "W": lambda dt: f"{dt.isocalendar()[1]:02d}",
    "F": lambda dt: calendar.month_name[dt.month],
    "m": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: calendar.month_abbr[dt.month],
    "n": lambda dt: str(dt.month),
    "t": lambda dt: str(calendar.monthrange(dt.year, dt.month)[1]),
    "L": lambda dt: "1" if calendar.isleap(dt.year) else "0",
    "o": lambda dt: str(dt.isocalendar()[0]),
    "Y": lambda dt: str(dt.year),
    "y": lambda dt: f"{dt.year % 100:02d}",
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "g": lambda dt: str(dt.hour % 12 or 12),
    "G": lambda dt: str(dt.hour),
    "h": lambda dt: f"{dt.hour % 12 or 12:02d}",
    "H": lambda dt: f"{dt.hour:02d}",
    "i": lambda dt: f"{dt.minute:02d}",
    "s": lambda dt: f"{dt.second:02d}",
    "u": lambda dt: f"{dt.microsecond:06d}",
    "v": lambda dt: f"{dt.microsecond // 1000:03d}",
    "e": lambda dt: str(getattr(dt.tzinfo, "key", dt.tzname() or "UTC")),
    "T": lambda dt: dt.tzname() or "UTC",
    "O": lambda dt: _offset(dt, colon=False),
    "P": lambda dt: _offset(dt, colon=True),
    "Z": lambda dt: str(int(dt.utcoffset().total_seconds()) if dt.utcoffset() else 0),
    "c": lambda dt: format_date(dt, "Y-m-d\\TH:i:sP"),
    "r": lambda dt: format_date(dt, "D, d M Y H:i:s O"),
    "U": lambda dt: str(int(dt.timestamp())),
}


def format_date(dt: datetime, fmt: str) -> str:
    """Format dt with a PHP date() style format string; backslash escapes a character."""
    out = []
    chars = iter(fmt)
    for ch in chars:
        if ch == "\\":
            out.append(next(chars, ""))
        elif ch in _FORMATTERS:
            out.append(_FORMATTERS[ch](dt))
        else:
            out.append(ch)
    return "".join(out)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def human_time_diff(start: datetime, end: datetime) -> str:
    """Difference between two times as e.g. '5 mins', '2 hours' or '3 days'."""
    diff = abs(int((end - start).total_seconds()))
    if diff < MINUTE:
        return _plural(max(diff, 1), "second")
    if diff < HOUR:
        return _plural(max(round(diff / MINUTE), 1), "min")
    if diff < DAY:
        return _plural(max(round(diff / HOUR), 1), "hour")
    if diff < WEEK:
        return _plural(max(round(diff / DAY), 1), "day")
    if diff < MONTH:
        return _plural(max(round(diff / WEEK), 1), "week")
    if diff < YEAR:
        return _plural(max(round(diff / MONTH), 1), "month")
    return _plural(max(round(diff / YEAR), 1), "year")
