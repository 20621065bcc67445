"""
Business logic per NLU intent. Every handler returns the reply text; remote
collaborators fail soft, so a reply is always produced.
"""
from extractor import ExtractedFields, extract_fallback_fields, capitalize_full_name
from hours import (
    get_hours_settings,
    is_open_on_date,
    is_time_within_hours,
    is_slot_aligned,
    format_opening_hours_for_day,
)
from nlu import param_text, session_id_for
from normalizer import format_date_time, is_sentinel, to_clinic_date, clinic_today
from staff_bot import handoff_buttons
from triage import classify_urgency, URGENCY_HIGH, URGENCY_MEDIUM

INTENT_SCHEDULE = "agendar_consulta"
INTENT_PLAN = "consultar_convenio"
INTENT_URGENCY = "urgencia"
INTENT_HANDOFF = "falar_atendente"

FALLBACK_REPLY = (
    "Desculpe, não entendi. Posso ajudar com agendamento de consultas, "
    "convênios aceitos ou falar com a nossa equipe."
)
SCHEDULE_EXAMPLE = "Ex.: João Silva 12/08 14:30 limpeza"
DEFAULT_PROCEDURE = "avaliação"
MAX_SUGGESTED_SLOTS = 5


# -------------------------------------------------
# Scheduling
# -------------------------------------------------
def scheduling_fields(params: dict, raw_text: str, today=None) -> ExtractedFields:
    """
    NLU parameters first; whatever is missing comes from the fallback extractor.
    The fallback name is only trusted when the text also carried a date or time.
    """
    params = params or {}
    name = param_text(params.get("nome"))
    date = param_text(params.get("data"))
    time_ = param_text(params.get("hora"))
    procedure = param_text(params.get("procedimento"))

    if name and date and time_ and procedure:
        return ExtractedFields(name, date, time_, procedure)

    fb = extract_fallback_fields(raw_text, today=today)
    if not name and (fb.date or fb.time):
        name = fb.name
    return ExtractedFields(
        name,
        date or fb.date,
        time_ or fb.time,
        procedure or fb.procedure,
    )


def _missing_reply(missing):
    if len(missing) == 1:
        what = missing[0]
    else:
        what = ", ".join(missing[:-1]) + " e " + missing[-1]
    return f"Para agendar, me envie {what}. {SCHEDULE_EXAMPLE}"


def _slots_reply(date_display, slots, prefix):
    if not slots:
        return f"{prefix} Não há horários livres em {date_display}. Pode escolher outra data?"
    listed = ", ".join(slots[:MAX_SUGGESTED_SLOTS])
    return f"{prefix} Horários livres em {date_display}: {listed}. Qual prefere?"


def handle_schedule(services, phone, raw_text, params, today=None):
    fields = scheduling_fields(params, raw_text, today=today)
    name = capitalize_full_name(fields.name)
    date_display = format_date_time(fields.date, "date")
    time_display = format_date_time(fields.time, "time")
    procedure = fields.procedure or DEFAULT_PROCEDURE

    missing = []
    if not name:
        missing.append("seu nome completo")
    if is_sentinel(date_display):
        missing.append("a data (dia/mês)")
    if not time_display or is_sentinel(time_display):
        missing.append("o horário")
    if missing:
        return _missing_reply(missing)

    day = to_clinic_date(date_display)
    if day < (today or clinic_today()):
        return f"A data {date_display} já passou. Qual outra data fica boa para você?"

    slot_minutes, weekly = get_hours_settings(services.hours)
    if not is_open_on_date(day, weekly):
        return f"Não atendemos em {date_display}. Pode escolher outro dia?"

    if not is_time_within_hours(day, time_display, weekly, slot_minutes):
        opening = format_opening_hours_for_day(day, weekly)
        return f"Em {date_display} atendemos {opening}. Pode escolher outro horário?"

    if not is_slot_aligned(time_display, slot_minutes):
        slots = services.calendar.free_slots(day, weekly, slot_minutes)
        return _slots_reply(date_display, slots, f"Atendemos em horários de {slot_minutes} em {slot_minutes} minutos.")

    if not services.calendar.is_slot_free(day, time_display, slot_minutes):
        slots = services.calendar.free_slots(day, weekly, slot_minutes)
        return _slots_reply(date_display, slots, f"O horário das {time_display} já está ocupado.")

    services.calendar.create_event(
        day,
        time_display,
        summary=f"{procedure} - {name}",
        description=f"Paciente: {name}\nTelefone: {phone}\nOrigem: WhatsApp",
        minutes=slot_minutes,
    )

    services.sheets.append_appointment(services.appointments_tab, {
        "date": date_display,
        "time": time_display,
        "name": name,
        "phone": phone,
        "procedure": procedure,
        "status": "Pré-agendado",
        "source": "WhatsApp",
    })

    services.staff_bot.send_message(
        "📅 Novo pré-agendamento\n"
        f"Paciente: {name}\nTelefone: {phone}\n"
        f"Data: {date_display}\nHora: {time_display}\nProcedimento: {procedure}"
    )

    return f"Perfeito, {name}! Sua consulta de {procedure} foi pré-agendada para {date_display} às {time_display}."


# -------------------------------------------------
# Insurance plans
# -------------------------------------------------
def handle_plan(services, raw_text, params):
    query = param_text((params or {}).get("convenio")) or raw_text
    plan = services.plans.match(query)
    if plan:
        return f"Atendemos {plan}, sim! Quer agendar uma avaliação? {SCHEDULE_EXAMPLE}"
    accepted = ", ".join(services.plans.names)
    return f"Não encontrei esse convênio na nossa lista. Atendemos: {accepted}."


# -------------------------------------------------
# Urgency triage / human handoff
# -------------------------------------------------
def start_handoff(services, phone, reason):
    if not services.handoffs.open(phone):
        return False
    services.staff_bot.send_message(
        f"🙋 {reason}\nPaciente: {phone}",
        buttons=handoff_buttons(phone),
    )
    return True


def handle_urgency(services, phone, raw_text):
    level = classify_urgency(raw_text)
    if level == URGENCY_HIGH:
        start_handoff(services, phone, f"URGÊNCIA: {raw_text[:200]}")
        return (
            "Sinto muito pelo que está passando. Avisei nossa equipe e alguém vai falar "
            "com você em instantes. Se houver sangramento intenso ou falta de ar, procure "
            "um pronto-socorro."
        )
    if level == URGENCY_MEDIUM:
        return (
            "Vamos tentar encaixar você o quanto antes. Envie seu nome, a data e o horário "
            f"desejados. {SCHEDULE_EXAMPLE}"
        )
    return f"Entendi. Quer agendar uma avaliação? {SCHEDULE_EXAMPLE}"


def handle_handoff(services, phone):
    if start_handoff(services, phone, "Paciente pediu para falar com atendente"):
        return "Certo! Vou chamar alguém da nossa equipe. Aguarde um instante, por favor."
    return "Você já está na fila de atendimento. Alguém da equipe vai responder em breve."


# -------------------------------------------------
# Entry point
# -------------------------------------------------
def handle_message(services, phone, text, today=None):
    """Returns (intent, reply)."""
    result = services.nlu.detect_intent(session_id_for(phone), text)

    if result is None:
        # NLU down: a message carrying both a date and a time is still a booking
        fb = extract_fallback_fields(text, today=today)
        if fb.date and fb.time:
            return INTENT_SCHEDULE, handle_schedule(services, phone, text, {}, today=today)
        return "", FALLBACK_REPLY

    intent = result.intent
    if intent == INTENT_SCHEDULE:
        return intent, handle_schedule(services, phone, text, result.parameters, today=today)
    if intent == INTENT_PLAN:
        return intent, handle_plan(services, text, result.parameters)
    if intent == INTENT_URGENCY:
        return intent, handle_urgency(services, phone, text)
    if intent == INTENT_HANDOFF:
        return intent, handle_handoff(services, phone)

    return intent, result.fulfillment_text or FALLBACK_REPLY
