import pytest

from app import create_app
from conftest import make_services, nlu_result

PATIENT = "whatsapp:+5511987654321"
PHONE = "5511987654321"


def claim_update(action="assumir", chat_id=100, phone=PHONE):
    return {
        "update_id": 1,
        "callback_query": {
            "id": "cb-1",
            "data": f"{action}:{phone}",
            "from": {"id": chat_id, "first_name": "Ana", "last_name": "Souza"},
            "message": {"chat": {"id": chat_id}},
        },
    }


@pytest.fixture
def services():
    return make_services(nlu_result("Default Welcome Intent", text="Olá! Como posso ajudar?"))


@pytest.fixture
def client(services):
    return create_app(services).test_client()


def test_health(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "OK"


def test_reply_is_twiml_and_logged(client, services):
    resp = client.post("/whatsapp", data={"Body": " oi ", "From": PATIENT, "MessageSid": "SM1"})

    assert resp.status_code == 200
    assert resp.mimetype == "application/xml"
    body = resp.get_data(as_text=True)
    assert "<Message>" in body
    assert "Como posso ajudar?" in body

    tab, row = services.sheets.rows[0]
    assert tab == "Log"
    assert row[1:] == [PHONE, "oi", "Default Welcome Intent", "Olá! Como posso ajudar?"]
    assert row[0].endswith("-03:00")


def test_missing_fields_are_rejected(client, services):
    assert client.post("/whatsapp", data={"Body": "", "From": PATIENT}).status_code == 400
    assert client.post("/whatsapp", data={"Body": "oi"}).status_code == 400
    assert services.nlu.calls == []


def test_non_brazilian_phone_is_rejected(client, services):
    resp = client.post("/whatsapp", data={"Body": "oi", "From": "whatsapp:+14155238886"})
    assert resp.status_code == 400
    assert services.nlu.calls == []


def test_duplicate_message_sid_is_ignored(client, services):
    client.post("/whatsapp", data={"Body": "oi", "From": PATIENT, "MessageSid": "SM1"})
    resp = client.post("/whatsapp", data={"Body": "oi", "From": PATIENT, "MessageSid": "SM1"})

    assert resp.status_code == 200
    assert "<Message>" not in resp.get_data(as_text=True)
    assert len(services.nlu.calls) == 1


def test_bot_is_silent_during_handoff(client, services):
    services.handoffs.open(PHONE)
    resp = client.post("/whatsapp", data={"Body": "alguém aí?", "From": PATIENT})

    assert "<Message>" not in resp.get_data(as_text=True)
    assert services.nlu.calls == []
    assert services.sheets.rows[0][1][3] == "handoff"


def test_staff_claims_handoff(client, services):
    services.handoffs.open(PHONE)
    resp = client.post("/telegram", json=claim_update())

    assert resp.status_code == 200
    assert services.handoffs.get(PHONE) == {"status": "claimed", "agent": "Ana Souza"}
    phone, body = services.sender.sent[0]
    assert phone == PHONE
    assert body.startswith("Olá! Aqui é Ana Souza, da Clínica Teste.")
    assert services.staff_bot.answers == [("cb-1", "Atendimento assumido.")]


def test_claim_without_open_handoff(client, services):
    client.post("/telegram", json=claim_update())
    assert services.sender.sent == []
    assert services.staff_bot.answers == [("cb-1", "Atendimento não encontrado.")]


def test_second_staff_cannot_claim(client, services):
    services.staff_bot.staff_ids.append("200")
    services.handoffs.open(PHONE)
    services.handoffs.claim(PHONE, "Bia")

    client.post("/telegram", json=claim_update(chat_id=200))
    assert services.staff_bot.answers == [("cb-1", "Já assumido por Bia.")]


def test_staff_closes_handoff(client, services):
    services.handoffs.open(PHONE)
    client.post("/telegram", json=claim_update(action="encerrar"))

    assert not services.handoffs.is_active(PHONE)
    assert services.sender.sent[0][1].startswith("Atendimento encerrado.")


def test_non_staff_callback_is_refused(client, services):
    services.handoffs.open(PHONE)
    client.post("/telegram", json=claim_update(chat_id=999))

    assert services.handoffs.get(PHONE)["status"] == "waiting"
    assert services.staff_bot.answers == [("cb-1", "Não autorizado.")]


def test_unrelated_telegram_updates_are_acknowledged(client, services):
    resp = client.post("/telegram", json={"update_id": 2, "message": {"text": "oi"}})
    assert resp.status_code == 200
    assert services.staff_bot.answers == []


def test_telegram_secret_token(services):
    services.telegram_secret = "s3cret"
    client = create_app(services).test_client()

    assert client.post("/telegram", json=claim_update()).status_code == 403
    resp = client.post(
        "/telegram", json=claim_update(),
        headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
    )
    assert resp.status_code == 200


def test_send_failure_does_not_break_callback(client, services):
    def boom(phone, body):
        raise RuntimeError("Twilio client not configured (missing SID/AUTH).")

    services.sender.send_text = boom
    services.handoffs.open(PHONE)
    resp = client.post("/telegram", json=claim_update())

    assert resp.status_code == 200
    assert services.staff_bot.answers == [("cb-1", "Atendimento assumido.")]
