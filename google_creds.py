import base64
import json
import os

from google.oauth2.service_account import Credentials

from config import SERVICE_BASE64, SERVICE_JSON, SERVICE_FILE

DIALOGFLOW_SCOPES = ["https://www.googleapis.com/auth/dialogflow"]
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]


def load_service_info(b64=SERVICE_BASE64, raw_json=SERVICE_JSON, path=SERVICE_FILE):
    """Service account dict from base64 env, raw JSON env or a file. None when unset."""
    if b64:
        return json.loads(base64.b64decode(b64).decode("utf-8"))

    if raw_json:
        return json.loads(raw_json)

    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    return None


def build_credentials(service_info, scopes):
    return Credentials.from_service_account_info(service_info, scopes=scopes)
