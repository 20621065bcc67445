import requests

import staff_bot
from handoff import HandoffRegistry
from staff_bot import StaffBot, handoff_buttons, parse_callback


class FakeResponse:
    def __init__(self, status_code=200, text="{}"):
        self.status_code = status_code
        self.text = text


def record_posts(monkeypatch, status_code=200, error=None):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        if error:
            raise error
        return FakeResponse(status_code)

    monkeypatch.setattr(staff_bot.requests, "post", fake_post)
    return calls


def test_send_message_to_every_staff_chat(monkeypatch):
    calls = record_posts(monkeypatch)
    bot = StaffBot("123:abc", ["100", "200"])

    assert bot.send_message("Novo paciente", buttons=handoff_buttons("5511987654321")) is True

    assert [c[1]["chat_id"] for c in calls] == ["100", "200"]
    url, payload = calls[0]
    assert url == "https://api.telegram.org/bot123:abc/sendMessage"
    assert payload["text"] == "Novo paciente"
    keyboard = payload["reply_markup"]["inline_keyboard"]
    assert keyboard[0][0]["callback_data"] == "assumir:5511987654321"
    assert keyboard[1][0]["callback_data"] == "encerrar:5511987654321"


def test_send_message_without_buttons(monkeypatch):
    calls = record_posts(monkeypatch)
    StaffBot("t", ["100"]).send_message("oi")
    assert "reply_markup" not in calls[0][1]


def test_send_failures(monkeypatch):
    record_posts(monkeypatch, status_code=400)
    assert StaffBot("t", ["100"]).send_message("oi") is False

    record_posts(monkeypatch, error=requests.Timeout("slow"))
    assert StaffBot("t", ["100"]).send_message("oi") is False


def test_disabled_bot_does_not_post(monkeypatch):
    calls = record_posts(monkeypatch)
    assert StaffBot("", ["100"]).send_message("oi") is False
    assert StaffBot("t", []).send_message("oi") is False
    assert calls == []


def test_answer_callback(monkeypatch):
    calls = record_posts(monkeypatch)
    assert StaffBot("t", ["100"]).answer_callback("cb-1", "ok") is True
    assert calls[0] == (
        "https://api.telegram.org/bott/answerCallbackQuery",
        {"callback_query_id": "cb-1", "text": "ok"},
    )


def test_parse_callback():
    update = {
        "callback_query": {
            "id": "cb-9",
            "data": "assumir:5511987654321",
            "from": {"id": 100, "username": "ana_recepcao"},
            "message": {"chat": {"id": -500}},
        }
    }
    assert parse_callback(update) == ("assumir", "5511987654321", "ana_recepcao", "cb-9", -500)


def test_parse_callback_rejects_unknown_data():
    assert parse_callback({}) is None
    assert parse_callback(None) is None
    assert parse_callback({"message": {"text": "oi"}}) is None
    assert parse_callback({"callback_query": {"data": "apagar:5511"}}) is None
    assert parse_callback({"callback_query": {"data": "assumir:"}}) is None


def test_parse_callback_defaults_staff_name():
    update = {"callback_query": {"id": "x", "data": "encerrar:55", "from": {"id": 7}}}
    assert parse_callback(update) == ("encerrar", "55", "Equipe", "x", 7)


def test_handoff_registry_lifecycle():
    reg = HandoffRegistry()
    assert reg.open("55") is True
    assert reg.open("55") is False
    assert reg.get("55") == {"status": "waiting", "agent": ""}

    assert reg.claim("55", "Ana") == "claimed"
    assert reg.claim("55", "Ana") == "claimed"
    assert reg.claim("55", "Bia") == "already_claimed"
    assert reg.claim("56", "Ana") == "not_found"

    assert reg.close("55") is True
    assert reg.close("55") is False
    assert not reg.is_active("55")
    assert reg.get("55") is None
