import requests

from admin import is_staff_chat

TELEGRAM_API = "https://api.telegram.org/bot{token}/{method}"

ACTION_CLAIM = "assumir"
ACTION_CLOSE = "encerrar"


def handoff_buttons(phone: str):
    return [
        [{"text": "Assumir atendimento", "callback_data": f"{ACTION_CLAIM}:{phone}"}],
        [{"text": "Encerrar", "callback_data": f"{ACTION_CLOSE}:{phone}"}],
    ]


def parse_callback(update: dict):
    """
    Telegram update -> (action, phone, staff_name, callback_id, chat_id),
    or None when it is not a callback query we understand.
    """
    cq = (update or {}).get("callback_query")
    if not isinstance(cq, dict):
        return None

    data = (cq.get("data") or "").strip()
    action, _, phone = data.partition(":")
    if action not in (ACTION_CLAIM, ACTION_CLOSE) or not phone:
        return None

    sender = cq.get("from") or {}
    staff_name = " ".join(
        p for p in (sender.get("first_name"), sender.get("last_name")) if p
    ) or sender.get("username") or "Equipe"
    chat_id = ((cq.get("message") or {}).get("chat") or {}).get("id") or sender.get("id")
    return action, phone, staff_name, cq.get("id"), chat_id


class StaffBot:
    """Staff notifications through a Telegram bot."""

    def __init__(self, token, chat_ids, timeout=10):
        self.token = (token or "").strip()
        self.chat_ids = list(chat_ids or [])
        self.timeout = timeout

    @property
    def enabled(self):
        return bool(self.token and self.chat_ids)

    def is_staff(self, chat_id) -> bool:
        return is_staff_chat(chat_id, self.chat_ids)

    def _call(self, method: str, payload: dict) -> bool:
        url = TELEGRAM_API.format(token=self.token, method=method)
        try:
            resp = requests.post(url, json=payload, timeout=self.timeout)
            if resp.status_code != 200:
                print("[Telegram API error] method:", method, "status:", resp.status_code, "text:", resp.text[:300])
                return False
            return True
        except Exception as e:
            print("[Telegram Request Exception]", method, repr(e))
            return False

    def send_message(self, text: str, buttons=None) -> bool:
        """Sends to every staff chat. True if at least one delivery succeeded."""
        if not self.enabled:
            print("Staff bot disabled, notification dropped:", (text or "")[:80])
            return False

        sent = False
        for chat_id in self.chat_ids:
            payload = {"chat_id": chat_id, "text": text}
            if buttons:
                payload["reply_markup"] = {"inline_keyboard": buttons}
            sent = self._call("sendMessage", payload) or sent
        return sent

    def answer_callback(self, callback_id, text: str = "") -> bool:
        if not self.token or not callback_id:
            return False
        return self._call("answerCallbackQuery", {"callback_query_id": callback_id, "text": text})
