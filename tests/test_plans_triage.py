import pytest

from plans import DEFAULT_PLANS, InsurancePlans, fold_text
from triage import classify_urgency, URGENCY_HIGH, URGENCY_LOW, URGENCY_MEDIUM


class StubSheets:
    def __init__(self, names):
        self.names = names
        self.reads = []

    def read_column(self, tab, col="A", skip_header=True):
        self.reads.append((tab, col))
        return self.names


def test_fold_text():
    assert fold_text("  SulAmérica   Odonto! ") == "sulamerica odonto"
    assert fold_text("Inchaço") == "inchaco"
    assert fold_text(None) == ""


@pytest.mark.parametrize("text, expected", [
    ("Vocês aceitam Amil?", None),
    ("aceitam amil dental?", "Amil Dental"),
    ("AMIL DENTAL", "Amil Dental"),
    ("amil", "Amil Dental"),
    ("tenho odontoprev", "Odontoprev"),
    ("sulamerica", "SulAmérica Odonto"),
    ("unimed saude", None),
    ("", None),
    ("am", None),
])
def test_match(text, expected):
    plans = InsurancePlans(["Odontoprev", "Amil Dental", "SulAmérica Odonto"])
    assert plans.match(text) == expected


def test_names_are_an_immutable_snapshot():
    source = ["Odontoprev", " ", "Amil Dental "]
    plans = InsurancePlans(source)
    source.append("Outro")
    assert plans.names == ("Odontoprev", "Amil Dental")


def test_load_from_sheet():
    sheets = StubSheets(["Plano A", "Plano B"])
    plans = InsurancePlans.load(sheets, "Convenios")
    assert plans.names == ("Plano A", "Plano B")
    assert sheets.reads == [("Convenios", "A")]


def test_load_falls_back_to_defaults():
    assert InsurancePlans.load(StubSheets([]), "Convenios").names == DEFAULT_PLANS
    assert InsurancePlans.load(None, "Convenios").names == DEFAULT_PLANS


@pytest.mark.parametrize("text, level", [
    ("meu dente está sangrando", URGENCY_HIGH),
    ("estou com o rosto inchado", URGENCY_HIGH),
    ("Quebrei o dente numa pancada", URGENCY_HIGH),
    ("dor insuportável, não consigo dormir", URGENCY_HIGH),
    ("estou com dor de dente", URGENCY_MEDIUM),
    ("meu dente está doendo", URGENCY_MEDIUM),
    ("a restauração caiu", URGENCY_MEDIUM),
    ("quero clarear os dentes", URGENCY_LOW),
    ("dorival", URGENCY_LOW),
    ("", URGENCY_LOW),
    (None, URGENCY_LOW),
])
def test_classify_urgency(text, level):
    assert classify_urgency(text) == level
