"""
Date / time normalization for values coming from the NLU service or from the
fallback extractor.

Every accepted spelling is an entry in an ordered table of
(tag, pattern, extractor) triples. Patterns are matched against the WHOLE
value, first hit wins. Nothing here raises: bad input becomes a sentinel.
"""
import datetime
import re
from collections import namedtuple

# Clinic time is a fixed UTC-3 offset (no DST), never system-local time.
CLINIC_TZ = datetime.timezone(datetime.timedelta(hours=-3))
CLINIC_TZ_SUFFIX = "-03:00"

INVALID_DATE = "Data inválida"
INVALID_TIME = "Hora inválida"

ValidDate = namedtuple("ValidDate", ["display"])
ValidTime = namedtuple("ValidTime", ["display"])
Invalid = namedtuple("Invalid", ["kind"])

_KIND_ALIASES = {
    "date": "date",
    "data": "date",
    "time": "time",
    "hora": "time",
}

# zero-width spaces/joiners, bidi marks, word joiner, BOM, soft hyphen
_INVISIBLE_RE = re.compile("[\u00ad\u180e\u200b-\u200f\u202a-\u202e\u2060-\u2064\ufeff]")

_ISO_DATETIME = (
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:[.,]\d+)?)?)?"
    r"(Z|[+-]\d{2}:?\d{2})?"
)
_ISO_DATETIME_RE = re.compile(_ISO_DATETIME, re.IGNORECASE)
_TRUNCATED_DATE_RE = re.compile(r"\d{4}(?:-\d{1,2})?")


def clean_value(value) -> str:
    """Strips invisible characters and surrounding whitespace. Non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return _INVISIBLE_RE.sub("", value).strip()


def _parse_offset(raw):
    if not raw:
        return None
    if raw.upper() == "Z":
        return datetime.timezone.utc
    sign = -1 if raw[0] == "-" else 1
    digits = raw[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if hours > 23 or minutes > 59:
        raise ValueError(f"bad utc offset {raw!r}")
    return datetime.timezone(sign * datetime.timedelta(hours=hours, minutes=minutes))


def _iso_to_datetime(m):
    """Builds a datetime from an _ISO_DATETIME match. Raises ValueError on impossible values."""
    year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    hour = int(m.group(4) or 0)
    minute = int(m.group(5) or 0)
    second = int(m.group(6) or 0)
    tz = _parse_offset(m.group(7))
    return datetime.datetime(year, month, day, hour, minute, second, tzinfo=tz)


# -------------------------------------------------
# Time
# -------------------------------------------------
def _time_from_iso(m):
    if m.group(4) is None:
        return None
    dt = _iso_to_datetime(m)
    if dt.tzinfo is not None:
        dt = dt.astimezone(CLINIC_TZ)
    return dt.hour, dt.minute


def _hour_minute(m):
    return int(m.group(1)), int(m.group(2))


def _hour_only(m):
    return int(m.group(1)), 0


TIME_FORMATS = (
    ("iso_datetime", _ISO_DATETIME_RE, _time_from_iso),
    ("h_with_minutes", re.compile(r"(\d{1,2})\s*h\s*(\d{1,2})", re.IGNORECASE), _hour_minute),
    ("h_only", re.compile(r"(\d{1,2})\s*h", re.IGNORECASE), _hour_only),
    ("colon", re.compile(r"(\d{1,2}):(\d{1,2})"), _hour_minute),
    ("colon_h", re.compile(r"(\d{1,2}):(\d{1,2})\s*h", re.IGNORECASE), _hour_minute),
    ("hhmm", re.compile(r"(\d{2})(\d{2})"), _hour_minute),
    ("bare_hour", re.compile(r"(\d{1,2})"), _hour_only),
)


def valid_clock(hour: int, minute: int) -> bool:
    return 0 <= hour <= 23 and 0 <= minute <= 59


def parse_time(value):
    """Returns ValidTime('HH:mm') or Invalid('time')."""
    s = clean_value(value)
    for _tag, pattern, extract in TIME_FORMATS:
        m = pattern.fullmatch(s)
        if not m:
            continue
        try:
            parts = extract(m)
        except (ValueError, OverflowError):
            return Invalid("time")
        if parts is None or not valid_clock(*parts):
            return Invalid("time")
        hour, minute = parts
        return ValidTime(f"{hour:02d}:{minute:02d}")
    return Invalid("time")


# -------------------------------------------------
# Date
# -------------------------------------------------
def _ymd(m):
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def _dmy(m):
    return int(m.group(3)), int(m.group(2)), int(m.group(1))


DATE_FORMATS = (
    ("iso", re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"), _ymd),
    ("br_slash", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), _dmy),
    ("br_dash", re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})"), _dmy),
    ("ymd_slash", re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})"), _ymd),
)


def _date_from_iso_datetime(s):
    m = _ISO_DATETIME_RE.fullmatch(s)
    if not m:
        return None
    # calendar fields are read in UTC; naive values are taken as UTC
    try:
        dt = _iso_to_datetime(m)
        if dt.tzinfo is not None:
            dt = dt.astimezone(datetime.timezone.utc)
    except (ValueError, OverflowError):
        return None
    return dt.date()


def parse_date(value):
    """Returns ValidDate('DD/MM/YYYY') or Invalid('date')."""
    s = clean_value(value)
    if not s or _TRUNCATED_DATE_RE.fullmatch(s):
        return Invalid("date")

    for _tag, pattern, extract in DATE_FORMATS:
        m = pattern.fullmatch(s)
        if not m:
            continue
        year, month, day = extract(m)
        if not (1 <= month <= 12 and 1 <= day <= 31):
            return Invalid("date")
        try:
            d = datetime.date(year, month, day)
        except ValueError:
            return Invalid("date")
        return ValidDate(d.strftime("%d/%m/%Y"))

    d = _date_from_iso_datetime(s)
    if d is None:
        return Invalid("date")
    return ValidDate(d.strftime("%d/%m/%Y"))


def format_date_time(value, kind: str) -> str:
    """
    Canonical display form of a date ('DD/MM/YYYY') or time ('HH:mm').

    Blank time -> '', blank date -> INVALID_DATE. Unparseable values give
    INVALID_DATE / INVALID_TIME. Unknown kinds give ''.
    """
    kind = _KIND_ALIASES.get((kind or "").strip().lower()) if isinstance(kind, str) else None
    if kind is None:
        return ""

    s = clean_value(value)
    if not s:
        return "" if kind == "time" else INVALID_DATE

    result = parse_time(s) if kind == "time" else parse_date(s)
    if isinstance(result, Invalid):
        return INVALID_TIME if kind == "time" else INVALID_DATE
    return result.display


def is_sentinel(value) -> bool:
    return value in (INVALID_DATE, INVALID_TIME)


def to_clinic_date(display: str):
    """'DD/MM/YYYY' -> datetime.date, or None."""
    try:
        return datetime.datetime.strptime(display, "%d/%m/%Y").date()
    except (TypeError, ValueError):
        return None


def clinic_today():
    return datetime.datetime.now(CLINIC_TZ).date()


def clinic_now_iso() -> str:
    return datetime.datetime.now(CLINIC_TZ).replace(microsecond=0).isoformat()
