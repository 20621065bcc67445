import threading

STATUS_WAITING = "waiting"
STATUS_CLAIMED = "claimed"


class HandoffRegistry:
    """Patients currently handed to a human; the bot stays quiet for them."""

    def __init__(self):
        self._lock = threading.Lock()
        self._open = {}

    def open(self, phone: str) -> bool:
        """False when a handoff for this phone is already open."""
        with self._lock:
            if phone in self._open:
                return False
            self._open[phone] = {"status": STATUS_WAITING, "agent": ""}
            return True

    def claim(self, phone: str, agent: str):
        """
        Returns 'claimed', 'already_claimed' (by someone else) or 'not_found'.
        """
        with self._lock:
            entry = self._open.get(phone)
            if entry is None:
                return "not_found"
            if entry["status"] == STATUS_CLAIMED and entry["agent"] != agent:
                return "already_claimed"
            self._open[phone] = {"status": STATUS_CLAIMED, "agent": agent}
            return "claimed"

    def close(self, phone: str) -> bool:
        with self._lock:
            return self._open.pop(phone, None) is not None

    def is_active(self, phone: str) -> bool:
        with self._lock:
            return phone in self._open

    def get(self, phone: str):
        with self._lock:
            entry = self._open.get(phone)
            return dict(entry) if entry else None
