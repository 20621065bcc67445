import datetime
import re

from normalizer import valid_clock

DEFAULT_HOURS = {
    "slot_minutes": 30,
    "weekly": {
        "mon": [{"start": "08:00", "end": "12:00"}, {"start": "13:30", "end": "18:00"}],
        "tue": [{"start": "08:00", "end": "12:00"}, {"start": "13:30", "end": "18:00"}],
        "wed": [{"start": "08:00", "end": "12:00"}, {"start": "13:30", "end": "18:00"}],
        "thu": [{"start": "08:00", "end": "12:00"}, {"start": "13:30", "end": "18:00"}],
        "fri": [{"start": "08:00", "end": "12:00"}, {"start": "13:30", "end": "18:00"}],
        "sat": [{"start": "08:00", "end": "12:00"}],
        "sun": []
    }
}

WEEKDAY_KEYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


def get_hours_settings(hours=None):
    if not isinstance(hours, dict):
        hours = DEFAULT_HOURS
    slot_minutes = hours.get("slot_minutes", DEFAULT_HOURS["slot_minutes"])
    try:
        slot_minutes = int(slot_minutes)
        if slot_minutes <= 0:
            slot_minutes = DEFAULT_HOURS["slot_minutes"]
    except (TypeError, ValueError):
        slot_minutes = DEFAULT_HOURS["slot_minutes"]
    weekly = hours.get("weekly", DEFAULT_HOURS["weekly"])
    if not isinstance(weekly, dict):
        weekly = DEFAULT_HOURS["weekly"]
    return slot_minutes, weekly


def parse_hhmm_to_minutes(hhmm: str):
    hhmm = (hhmm or "").strip()
    m = re.match(r"^(\d{1,2}):(\d{2})$", hhmm)
    if not m:
        return None
    h = int(m.group(1))
    mi = int(m.group(2))
    if not valid_clock(h, mi):
        return None
    return h * 60 + mi


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _intervals_for(day: datetime.date, weekly: dict):
    # dates are already clinic-local (fixed -03:00), weekday needs no tz math
    intervals = weekly.get(WEEKDAY_KEYS[day.weekday()], [])
    if not isinstance(intervals, list):
        return []
    out = []
    for it in intervals:
        if not isinstance(it, dict):
            continue
        start = parse_hhmm_to_minutes(it.get("start", ""))
        end = parse_hhmm_to_minutes(it.get("end", ""))
        if start is None or end is None or end <= start:
            continue
        out.append((start, end))
    return out


def is_open_on_date(day: datetime.date, weekly: dict):
    return len(_intervals_for(day, weekly)) > 0


def is_time_within_hours(day: datetime.date, time_24h: str, weekly: dict, slot_minutes: int = 0):
    """True when [time, time + slot_minutes) fits inside one opening interval."""
    tmin = parse_hhmm_to_minutes(time_24h)
    if tmin is None:
        return False
    for start, end in _intervals_for(day, weekly):
        if start <= tmin and tmin + slot_minutes <= end and tmin < end:
            return True
    return False


def is_slot_aligned(time_24h: str, slot_minutes: int):
    tmin = parse_hhmm_to_minutes(time_24h)
    if tmin is None:
        return False
    return (tmin % slot_minutes) == 0


def candidate_slots(day: datetime.date, weekly: dict, slot_minutes: int):
    """All slot start times (minutes since midnight) for the day."""
    out = []
    for start, end in _intervals_for(day, weekly):
        t = start
        while t + slot_minutes <= end:
            out.append(t)
            t += slot_minutes
    return out


def overlaps(start: int, end: int, busy) -> bool:
    return any(b_start < end and start < b_end for b_start, b_end in busy)


def free_slots(day: datetime.date, busy, weekly: dict, slot_minutes: int):
    """'HH:MM' slot starts that do not overlap any busy (start, end) minute pair."""
    return [
        minutes_to_hhmm(t)
        for t in candidate_slots(day, weekly, slot_minutes)
        if not overlaps(t, t + slot_minutes, busy)
    ]


def format_opening_hours_for_day(day: datetime.date, weekly: dict):
    intervals = _intervals_for(day, weekly)
    if not intervals:
        return "Fechado"
    return ", ".join(f"{minutes_to_hhmm(s)}-{minutes_to_hhmm(e)}" for s, e in intervals)
