import os
from dotenv import load_dotenv

# -------------------------------------------------
# Load environment variables
# -------------------------------------------------
load_dotenv()

print("LOCAL DF_PROJECT_ID exists?", bool(os.getenv("DF_PROJECT_ID")))
print("LOCAL GOOGLE_APPLICATION_CREDENTIALS_BASE64 exists?", bool(os.getenv("GOOGLE_APPLICATION_CREDENTIALS_BASE64")))
print("LOCAL SERVICE_ACCOUNT_JSON exists?", bool(os.getenv("SERVICE_ACCOUNT_JSON")))
print("LOCAL SERVICE_ACCOUNT_FILE exists?", bool(os.getenv("SERVICE_ACCOUNT_FILE")))
print("LOCAL GOOGLE_SHEETS_ID exists?", bool(os.getenv("GOOGLE_SHEETS_ID")))
print("LOCAL TELEGRAM_BOT_TOKEN exists?", bool(os.getenv("TELEGRAM_BOT_TOKEN")))

# -------------------------------------------------
# Google service account (base64, raw JSON or file)
# -------------------------------------------------
SERVICE_BASE64 = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_BASE64", "").strip()
SERVICE_JSON = os.getenv("SERVICE_ACCOUNT_JSON", "").strip()
SERVICE_FILE = os.getenv("SERVICE_ACCOUNT_FILE", "").strip()

# -------------------------------------------------
# Dialogflow (NLU)
# -------------------------------------------------
DF_PROJECT_ID = os.getenv("DF_PROJECT_ID", "").strip()
DF_LANGUAGE_CODE = os.getenv("DF_LANGUAGE_CODE", "pt-BR").strip()

# -------------------------------------------------
# Google Sheets
# -------------------------------------------------
GOOGLE_SHEETS_ID = os.getenv("GOOGLE_SHEETS_ID", "").strip()
SHEET_LOG_TAB = os.getenv("SHEET_LOG_TAB", "Log").strip()
SHEET_APPOINTMENTS_TAB = os.getenv("SHEET_APPOINTMENTS_TAB", "Agendamentos").strip()
SHEET_PLANS_TAB = os.getenv("SHEET_PLANS_TAB", "Convenios").strip()

# -------------------------------------------------
# Google Calendar
# -------------------------------------------------
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "").strip()

# -------------------------------------------------
# Twilio WhatsApp gateway
# -------------------------------------------------
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "").strip()
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "").strip()
TWILIO_WHATSAPP_NUMBER = os.getenv("TWILIO_WHATSAPP_NUMBER", "whatsapp:+14155238886").strip()

# -------------------------------------------------
# Staff Telegram bot
# -------------------------------------------------
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "").strip()
TELEGRAM_STAFF_CHAT_IDS = [
    x.strip() for x in os.getenv("TELEGRAM_STAFF_CHAT_IDS", "").split(",") if x.strip()
]
TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET", "").strip()

CLINIC_NAME = os.getenv("CLINIC_NAME", "Clínica Sorriso").strip()
PORT = int(os.getenv("PORT", "5000"))
