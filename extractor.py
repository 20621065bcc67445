"""
Fallback field extraction for free text like
"João Silva 12/08 14:30 tratamento de canal", used when the NLU service
returns no (or partial) scheduling parameters.

Heuristic, first-match parser:
- date:  first "D/M" or "D-M" (no year); the year is projected into the future
- time:  first "H", "Hh", "H:MM" or "HhMM" outside the date token
- name:  up to 4 words before the earliest of date/time
- procedure: up to 5 words after the time

A date token that is really part of a longer number (phone fragment, a
full date with year) is not filtered out. The date is not calendar-checked
here; format_date_time() rejects impossible dates later. The time is.
"""
import re
from collections import namedtuple

from normalizer import CLINIC_TZ_SUFFIX, clinic_today, valid_clock

NAME_MAX_WORDS = 4
PROCEDURE_MAX_WORDS = 5

ExtractedFields = namedtuple("ExtractedFields", ["name", "date", "time", "procedure"])

EMPTY_FIELDS = ExtractedFields("", "", "", "")

DATE_TOKEN_RE = re.compile(r"(\d{1,2})[/-](\d{1,2})")

# 14:30 | 14:30h | 8h30 | 8h30min | 10 h 30 | 9h | 15 ; never glued to other digits, "/", "-" or ":"
TIME_TOKEN_RE = re.compile(
    r"(?<![\d/:-])\b(\d{1,2})(?:\s*[:h]\s*(\d{2})(?!\d)(?:\s*(?:hs?|min)\b)?|\s*hs?\b)?(?![\d/:-])",
    re.IGNORECASE,
)


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def _first_words(text: str, limit: int) -> str:
    return " ".join(text.split()[:limit])


def _message_text(raw):
    """Accepts plain text or a gateway payload ({"text": {"message": ...}} / {"text": "..."})."""
    if isinstance(raw, dict):
        raw = raw.get("text")
        if isinstance(raw, dict):
            raw = raw.get("message")
    return raw if isinstance(raw, str) else ""


def resolve_year(day: int, month: int, today=None) -> int:
    """Current year, or next year when day/month already passed."""
    today = today or clinic_today()
    if (month, day) < (today.month, today.day):
        return today.year + 1
    return today.year


def _find_date(text, today):
    m = DATE_TOKEN_RE.search(text)
    if not m:
        return None, ""
    day, month = int(m.group(1)), int(m.group(2))
    year = resolve_year(day, month, today)
    return m, f"{year}-{month:02d}-{day:02d}T00:00:00{CLINIC_TZ_SUFFIX}"


def _find_time(text, date_match):
    if date_match:
        # blank the date token so its digits are never read as an hour
        start, end = date_match.span()
        text = text[:start] + " " * (end - start) + text[end:]

    m = TIME_TOKEN_RE.search(text)
    if not m:
        return None, ""
    hour = int(m.group(1))
    minute = int(m.group(2) or 0)
    if not valid_clock(hour, minute):
        return None, ""
    return m, f"{hour:02d}:{minute:02d}"


def extract_fallback_fields(raw, today=None) -> ExtractedFields:
    """
    Recovers (name, date, time, procedure) from raw message text.

    `today` (datetime.date) pins the reference day for year projection;
    defaults to today in clinic time. Never raises.
    """
    text = normalize_whitespace(_message_text(raw))
    if not text:
        return EMPTY_FIELDS

    date_match, date = _find_date(text, today)
    time_match, time_ = _find_time(text, date_match)

    starts = [m.start() for m in (date_match, time_match) if m is not None]
    cut = min(starts) if starts else len(text)
    name = _first_words(text[:cut], NAME_MAX_WORDS)

    procedure = ""
    if time_match is not None:
        procedure = _first_words(text[time_match.end():], PROCEDURE_MAX_WORDS)

    return ExtractedFields(name, date, time_, procedure)


_WORD_START_RE = re.compile(r"(^|[-'’])(\w)")


def capitalize_full_name(name) -> str:
    """'maria DA silva' -> 'Maria Da Silva', 'ana-maria' -> 'Ana-Maria'."""
    if not isinstance(name, str):
        return ""
    words = name.split()
    return " ".join(
        _WORD_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), w.lower())
        for w in words
    )

