from plans import fold_text

URGENCY_HIGH = "alta"
URGENCY_MEDIUM = "media"
URGENCY_LOW = "baixa"

# -------------------------------------------------
# Urgency keywords (accent-free, lower case)
# IMPORTANT:
# - HIGH wins over MEDIUM when both appear
# - keep entries as they look after fold_text()
# -------------------------------------------------
HIGH_KEYWORDS = [
    "sangramento",
    "sangrando",
    "sangra",
    "rosto inchado",
    "inchaco no rosto",
    "face inchada",
    "inchado",
    "inchaco",
    "febre",
    "dente quebrou",
    "dente quebrado",
    "quebrei o dente",
    "dente caiu",
    "acidente",
    "pancada",
    "dor insuportavel",
    "dor muito forte",
    "nao consigo dormir",
]

MEDIUM_KEYWORDS = [
    "dor",
    "doendo",
    "doi",
    "sensibilidade",
    "sensivel",
    "restauracao caiu",
    "obturacao caiu",
    "aparelho quebrou",
    "gengiva",
]


def _contains(text, keywords):
    padded = f" {text} "
    return any(f" {k} " in padded for k in keywords)


def classify_urgency(text):
    """
    Returns URGENCY_HIGH, URGENCY_MEDIUM or URGENCY_LOW for a patient message.
    """
    if not text:
        return URGENCY_LOW

    t = fold_text(text)
    if _contains(t, HIGH_KEYWORDS):
        return URGENCY_HIGH
    if _contains(t, MEDIUM_KEYWORDS):
        return URGENCY_MEDIUM
    return URGENCY_LOW
