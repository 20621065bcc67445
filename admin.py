import re

BR_PHONE_RE = re.compile(r"^55\d{10,11}$")


def normalize_phone(s: str) -> str:
    """
    Digits-only Brazilian number with the 55 country code.
    '(11) 98765-4321' -> '5511987654321', 'whatsapp:+5511...' -> '5511...'.
    """
    raw = (s or "").strip().replace("whatsapp:", "").strip()
    digits = re.sub(r"\D", "", raw)

    # "+..." is already international; only local numbers get the 55 prefix
    if raw.startswith("+"):
        return digits

    digits = digits.lstrip("0")
    if len(digits) in (10, 11):
        return "55" + digits

    return digits


def is_valid_phone(phone: str) -> bool:
    return bool(BR_PHONE_RE.match(phone or ""))


def is_staff_chat(chat_id, staff_chat_ids) -> bool:
    chat_id = str(chat_id or "").strip()
    if not chat_id:
        return False
    return any(chat_id == str(a).strip() for a in staff_chat_ids or [])
