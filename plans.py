import re
import unicodedata

DEFAULT_PLANS = (
    "Amil Dental",
    "Bradesco Dental",
    "Odontoprev",
    "SulAmérica Odonto",
    "Porto Seguro Odonto",
    "Unimed Odonto",
    "MetLife",
    "Uniodonto",
)


def fold_text(s: str) -> str:
    """Lower-case, accents removed, punctuation turned into single spaces."""
    s = unicodedata.normalize("NFKD", s or "")
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = re.sub(r"[^\w]+", " ", s.lower())
    return " ".join(s.split())


class InsurancePlans:
    """Accepted insurance plans, held as an immutable snapshot."""

    def __init__(self, names=DEFAULT_PLANS):
        cleaned = [str(n).strip() for n in names or [] if str(n).strip()]
        self.names = tuple(cleaned)
        self._folded = tuple((fold_text(n), n) for n in self.names)

    @classmethod
    def load(cls, sheets, tab: str):
        """Reads plan names from column A of `tab`; default list when empty/unavailable."""
        names = sheets.read_column(tab, "A") if sheets is not None else []
        if not names:
            print("Plans sheet empty or unavailable — using default plan list")
            return cls(DEFAULT_PLANS)
        print(f"Loaded {len(names)} insurance plans")
        return cls(names)

    def match(self, text: str):
        """Accepted plan named in `text` (or whose name contains it), else None."""
        q = fold_text(text)
        if not q:
            return None
        padded = f" {q} "
        for folded, name in self._folded:
            if f" {folded} " in padded:
                return name
        for folded, name in self._folded:
            if len(q) >= 3 and q in folded:
                return name
        return None
