import datetime

from googleapiclient.discovery import build

from google_creds import build_credentials, CALENDAR_SCOPES
from hours import free_slots, overlaps, parse_hhmm_to_minutes
from normalizer import CLINIC_TZ

DAY_MINUTES = 24 * 60


def _parse_rfc3339(value: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))


def busy_to_minutes(day: datetime.date, busy):
    """
    Google free/busy periods -> (start, end) minutes since midnight on `day`
    in clinic time, clipped to the day. Periods not touching the day are dropped.
    """
    midnight = datetime.datetime(day.year, day.month, day.day, tzinfo=CLINIC_TZ)
    out = []
    for period in busy or []:
        try:
            start = _parse_rfc3339(period["start"]).astimezone(CLINIC_TZ)
            end = _parse_rfc3339(period["end"]).astimezone(CLINIC_TZ)
        except (KeyError, TypeError, ValueError):
            continue
        s = int((start - midnight).total_seconds() // 60)
        e = int((end - midnight).total_seconds() // 60)
        s, e = max(s, 0), min(e, DAY_MINUTES)
        if s < e:
            out.append((s, e))
    return out


def clinic_datetime(day: datetime.date, time_24h: str) -> datetime.datetime:
    minutes = parse_hhmm_to_minutes(time_24h)
    return datetime.datetime(day.year, day.month, day.day, tzinfo=CLINIC_TZ) + datetime.timedelta(minutes=minutes)


class CalendarService:
    """Free/busy lookup and event creation on one Google Calendar."""

    def __init__(self, service_info, calendar_id, api=None):
        self.service_info = service_info
        self.calendar_id = (calendar_id or "").strip()
        self.api = api

    @property
    def enabled(self):
        return self.api is not None and bool(self.calendar_id)

    def init(self):
        if self.api is not None:
            return
        if not self.service_info or not self.calendar_id:
            print("Calendar id or service account not set — Calendar disabled")
            return
        try:
            creds = build_credentials(self.service_info, CALENDAR_SCOPES)
            self.api = build("calendar", "v3", credentials=creds)
            print("Google Calendar initialized")
        except Exception as e:
            print("Google Calendar init failed:", repr(e))

    def busy_intervals(self, day: datetime.date):
        """Busy (start, end) minute pairs for the day. [] when disabled or on error."""
        if not self.enabled:
            return []
        start = datetime.datetime(day.year, day.month, day.day, tzinfo=CLINIC_TZ)
        end = start + datetime.timedelta(days=1)
        try:
            res = self.api.freebusy().query(body={
                "timeMin": start.isoformat(),
                "timeMax": end.isoformat(),
                "items": [{"id": self.calendar_id}]
            }).execute()
        except Exception as e:
            print("Calendar freebusy FAILED:", repr(e))
            return []
        busy = ((res.get("calendars") or {}).get(self.calendar_id) or {}).get("busy", [])
        return busy_to_minutes(day, busy)

    def free_slots(self, day: datetime.date, weekly: dict, slot_minutes: int):
        return free_slots(day, self.busy_intervals(day), weekly, slot_minutes)

    def is_slot_free(self, day: datetime.date, time_24h: str, slot_minutes: int) -> bool:
        start = parse_hhmm_to_minutes(time_24h)
        if start is None:
            return False
        return not overlaps(start, start + slot_minutes, self.busy_intervals(day))

    def create_event(self, day: datetime.date, time_24h: str, summary: str, description: str = "", minutes: int = 30):
        """Returns the created event id, or None."""
        if not self.enabled:
            return None
        start = clinic_datetime(day, time_24h)
        end = start + datetime.timedelta(minutes=minutes)
        try:
            event = self.api.events().insert(
                calendarId=self.calendar_id,
                body={
                    "summary": summary,
                    "description": description,
                    "start": {"dateTime": start.isoformat()},
                    "end": {"dateTime": end.isoformat()},
                }
            ).execute()
            return event.get("id")
        except Exception as e:
            print("Calendar event insert FAILED:", repr(e))
            return None
