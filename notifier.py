from twilio.rest import Client


def to_whatsapp_address(phone: str) -> str:
    phone = (phone or "").strip()
    if phone.startswith("whatsapp:"):
        return phone
    if not phone.startswith("+"):
        phone = "+" + phone
    return "whatsapp:" + phone


class WhatsAppSender:
    """Outbound WhatsApp text through Twilio."""

    def __init__(self, account_sid, auth_token, from_number):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._twilio = None

    def init(self):
        if self.account_sid and self.auth_token:
            self._twilio = Client(self.account_sid, self.auth_token)
            print("Twilio client initialized")
        else:
            print("Twilio SID/AUTH not set — outbound WhatsApp disabled")

    def send_text(self, phone: str, body: str) -> str:
        """
        Sends WhatsApp message via Twilio.
        Returns message SID if successful.
        Raises on error.
        """
        if not self._twilio:
            raise RuntimeError("Twilio client not configured (missing SID/AUTH).")
        if not self.from_number:
            raise RuntimeError("TWILIO_WHATSAPP_NUMBER not set.")

        msg = self._twilio.messages.create(
            from_=self.from_number,
            to=to_whatsapp_address(phone),
            body=(body or "").strip()
        )
        return msg.sid
