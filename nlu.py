from collections import namedtuple

import requests
from google.auth.transport.requests import Request

from google_creds import build_credentials, DIALOGFLOW_SCOPES

DETECT_INTENT_URL = "https://dialogflow.googleapis.com/v2/projects/{project}/agent/sessions/{session}:detectIntent"

NLUResult = namedtuple("NLUResult", ["intent", "parameters", "fulfillment_text", "output_contexts"])


def session_id_for(phone: str) -> str:
    return f"session-{phone}"


def param_text(value) -> str:
    """
    Flattens a Dialogflow parameter into plain text.
    Person entities come as {"name": "..."}; lists keep their first non-empty item.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        for key in ("name", "date_time", "startDateTime", "value"):
            if value.get(key):
                return param_text(value[key])
        return ""
    if isinstance(value, list):
        for item in value:
            text = param_text(item)
            if text:
                return text
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_query_result(data: dict) -> NLUResult:
    qr = (data or {}).get("queryResult") or {}
    intent = (qr.get("intent") or {}).get("displayName") or ""
    return NLUResult(
        intent=intent,
        parameters=qr.get("parameters") or {},
        fulfillment_text=(qr.get("fulfillmentText") or "").strip(),
        output_contexts=qr.get("outputContexts") or [],
    )


class DialogflowClient:
    """
    detectIntent over REST. Credentials are built once in init(); the access
    token is refreshed when missing or about to expire.
    """

    def __init__(self, project_id, service_info, language_code="pt-BR", timeout=10):
        self.project_id = project_id
        self.service_info = service_info
        self.language_code = language_code
        self.timeout = timeout
        self._credentials = None

    @property
    def enabled(self):
        return self._credentials is not None

    def init(self):
        if not self.project_id or not self.service_info:
            print("Dialogflow not configured (project id or service account missing) — NLU disabled")
            return
        try:
            self._credentials = build_credentials(self.service_info, DIALOGFLOW_SCOPES)
            print("Dialogflow client initialized")
        except Exception as e:
            print("Dialogflow init error:", repr(e))

    def _access_token(self):
        creds = self._credentials
        # valid == token present and not within the expiry clock skew
        if not creds.valid:
            creds.refresh(Request())
        return creds.token

    def detect_intent(self, session_id: str, text: str):
        """Returns NLUResult, or None when disabled or on any failure."""
        if not self.enabled:
            return None

        url = DETECT_INTENT_URL.format(project=self.project_id, session=session_id)
        body = {
            "queryInput": {
                "text": {
                    "text": text,
                    "languageCode": self.language_code
                }
            }
        }

        try:
            token = self._access_token()
            resp = requests.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout
            )
            resp.raise_for_status()
            return parse_query_result(resp.json())
        except requests.HTTPError as e:
            print("Dialogflow HTTP error:", e.response.status_code, e.response.text[:300])
        except Exception as e:
            print("Dialogflow request failed:", repr(e))
        return None
