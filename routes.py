from flask import request, Response
from twilio.twiml.messaging_response import MessagingResponse

from admin import normalize_phone, is_valid_phone
from handlers import handle_message
from normalizer import clinic_now_iso
from staff_bot import parse_callback, ACTION_CLAIM, ACTION_CLOSE


def _twiml(reply=None):
    resp = MessagingResponse()
    if reply:
        resp.message(reply)
    return Response(str(resp), mimetype="application/xml")


def log_message(services, phone, text, intent, reply):
    services.sheets.append_row(services.log_tab, [clinic_now_iso(), phone, text, intent, reply])


def _notify_patient(services, phone, body):
    try:
        services.sender.send_text(phone, body)
        return True
    except Exception as e:
        print("WhatsApp send failed:", phone, repr(e))
        return False


def register_routes(app, services):

    @app.get("/")
    def home():
        return "OK", 200

    @app.route("/whatsapp", methods=["POST"])
    def whatsapp_webhook():
        incoming = (request.values.get("Body") or "").strip()
        phone = normalize_phone(request.values.get("From", ""))

        if not phone or not incoming:
            print("Invalid webhook payload: phone or message missing")
            return "Dados inválidos", 400

        if not is_valid_phone(phone):
            print("Invalid phone:", phone)
            return "Telefone inválido", 400

        message_sid = (request.values.get("MessageSid") or "").strip()
        if services.already_processed(message_sid):
            print("Duplicate MessageSid ignored:", message_sid)
            return _twiml()

        # a human is talking to this patient; the bot only keeps the log
        if services.handoffs.is_active(phone):
            log_message(services, phone, incoming, "handoff", "")
            return _twiml()

        intent, reply = handle_message(services, phone, incoming)
        print(f"[{phone}] intent={intent or '-'} reply={reply[:80]!r}")

        log_message(services, phone, incoming, intent, reply)
        return _twiml(reply)

    @app.route("/telegram", methods=["POST"])
    def telegram_webhook():
        if services.telegram_secret:
            token = request.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
            if token != services.telegram_secret:
                return "Forbidden", 403

        parsed = parse_callback(request.get_json(silent=True) or {})
        if parsed is None:
            return "OK", 200

        action, phone, staff_name, callback_id, chat_id = parsed
        bot = services.staff_bot

        if not bot.is_staff(chat_id):
            print("Callback from non-staff chat:", chat_id)
            bot.answer_callback(callback_id, "Não autorizado.")
            return "OK", 200

        if action == ACTION_CLAIM:
            result = services.handoffs.claim(phone, staff_name)
            if result == "claimed":
                _notify_patient(
                    services, phone,
                    f"Olá! Aqui é {staff_name}, da {services.clinic_name}. Vou continuar seu atendimento por aqui."
                )
                bot.answer_callback(callback_id, "Atendimento assumido.")
            elif result == "already_claimed":
                agent = (services.handoffs.get(phone) or {}).get("agent", "")
                bot.answer_callback(callback_id, f"Já assumido por {agent}.")
            else:
                bot.answer_callback(callback_id, "Atendimento não encontrado.")

        elif action == ACTION_CLOSE:
            if services.handoffs.close(phone):
                _notify_patient(
                    services, phone,
                    "Atendimento encerrado. Se precisar de algo, é só mandar mensagem!"
                )
                bot.answer_callback(callback_id, "Atendimento encerrado.")
            else:
                bot.answer_callback(callback_id, "Atendimento não encontrado.")

        return "OK", 200
