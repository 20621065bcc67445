import threading
from collections import OrderedDict

import config
from calendar_service import CalendarService
from google_creds import load_service_info
from handoff import HandoffRegistry
from hours import DEFAULT_HOURS
from notifier import WhatsAppSender
from nlu import DialogflowClient
from plans import InsurancePlans
from sheets import SheetsStore
from staff_bot import StaffBot

SEEN_SIDS_LIMIT = 2000


class Services:
    """Collaborators shared by the request handlers. Built once at startup."""

    def __init__(self, nlu, sender, sheets, calendar, staff_bot, plans, handoffs=None,
                 hours=None, clinic_name=config.CLINIC_NAME,
                 log_tab=config.SHEET_LOG_TAB,
                 appointments_tab=config.SHEET_APPOINTMENTS_TAB,
                 telegram_secret=""):
        self.nlu = nlu
        self.sender = sender
        self.sheets = sheets
        self.calendar = calendar
        self.staff_bot = staff_bot
        self.plans = plans
        self.handoffs = handoffs or HandoffRegistry()
        self.hours = hours or DEFAULT_HOURS
        self.clinic_name = clinic_name
        self.log_tab = log_tab
        self.appointments_tab = appointments_tab
        self.telegram_secret = telegram_secret
        self._seen_sids = OrderedDict()
        self._seen_lock = threading.Lock()

    def already_processed(self, message_sid: str) -> bool:
        """Marks the gateway message id as seen; True if it was seen before."""
        if not message_sid:
            return False
        with self._seen_lock:
            if message_sid in self._seen_sids:
                return True
            self._seen_sids[message_sid] = True
            while len(self._seen_sids) > SEEN_SIDS_LIMIT:
                self._seen_sids.popitem(last=False)
            return False


def build_services():
    service_info = None
    try:
        service_info = load_service_info()
    except Exception as e:
        print("Service account load failed:", repr(e))

    nlu = DialogflowClient(config.DF_PROJECT_ID, service_info, config.DF_LANGUAGE_CODE)
    nlu.init()

    sender = WhatsAppSender(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN, config.TWILIO_WHATSAPP_NUMBER)
    sender.init()

    sheets = SheetsStore(service_info, config.GOOGLE_SHEETS_ID)
    sheets.init()

    calendar = CalendarService(service_info, config.GOOGLE_CALENDAR_ID)
    calendar.init()

    staff_bot = StaffBot(config.TELEGRAM_BOT_TOKEN, config.TELEGRAM_STAFF_CHAT_IDS)
    if not staff_bot.enabled:
        print("TELEGRAM_BOT_TOKEN or TELEGRAM_STAFF_CHAT_IDS not set — staff notifications disabled")

    plans = InsurancePlans.load(sheets, config.SHEET_PLANS_TAB)

    return Services(
        nlu=nlu,
        sender=sender,
        sheets=sheets,
        calendar=calendar,
        staff_bot=staff_bot,
        plans=plans,
        telegram_secret=config.TELEGRAM_WEBHOOK_SECRET,
    )
