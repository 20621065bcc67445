import pytest

from hours import free_slots
from nlu import NLUResult
from plans import InsurancePlans
from services import Services


class FakeNLU:
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def detect_intent(self, session_id, text):
        self.calls.append((session_id, text))
        return self.result


class FakeSender:
    def __init__(self):
        self.sent = []

    def send_text(self, phone, body):
        self.sent.append((phone, body))
        return "SM123"


class FakeSheets:
    def __init__(self):
        self.rows = []
        self.appointments = []

    def append_row(self, tab, values):
        self.rows.append((tab, list(values)))
        return True

    def append_appointment(self, tab, record):
        self.appointments.append((tab, dict(record)))
        return True


class FakeCalendar:
    def __init__(self, busy=None):
        self.busy = busy or []
        self.events = []

    def free_slots(self, day, weekly, slot_minutes):
        return free_slots(day, self.busy, weekly, slot_minutes)

    def is_slot_free(self, day, time_24h, slot_minutes):
        h, m = time_24h.split(":")
        start = int(h) * 60 + int(m)
        return not any(b_start < start + slot_minutes and start < b_end for b_start, b_end in self.busy)

    def create_event(self, day, time_24h, summary, description="", minutes=30):
        self.events.append((day, time_24h, summary))
        return "evt-1"


class FakeStaffBot:
    def __init__(self, staff_ids=("100",)):
        self.staff_ids = [str(x) for x in staff_ids]
        self.messages = []
        self.answers = []

    def is_staff(self, chat_id):
        return str(chat_id) in self.staff_ids

    def send_message(self, text, buttons=None):
        self.messages.append((text, buttons))
        return True

    def answer_callback(self, callback_id, text=""):
        self.answers.append((callback_id, text))
        return True


def make_services(nlu_result=None, busy=None):
    return Services(
        nlu=FakeNLU(nlu_result),
        sender=FakeSender(),
        sheets=FakeSheets(),
        calendar=FakeCalendar(busy),
        staff_bot=FakeStaffBot(),
        plans=InsurancePlans(["Odontoprev", "Amil Dental", "SulAmérica Odonto"]),
        clinic_name="Clínica Teste",
        log_tab="Log",
        appointments_tab="Agendamentos",
    )


def nlu_result(intent, parameters=None, text=""):
    return NLUResult(intent, parameters or {}, text, [])


@pytest.fixture
def services():
    return make_services()
