import re

from googleapiclient.discovery import build

from google_creds import build_credentials, SHEETS_SCOPES

# canonical field -> accepted header spellings (compared after _norm_header)
APPOINTMENT_HEADERS = {
    "date": ["data", "date", "data da consulta"],
    "time": ["hora", "horário", "horario", "time"],
    "name": ["nome", "paciente", "nome do paciente", "name"],
    "phone": ["telefone", "celular", "whatsapp", "phone"],
    "procedure": ["procedimento", "tratamento", "procedure"],
    "status": ["status", "situação", "situacao"],
    "source": ["origem", "source"],
}

APPOINTMENT_FIELDS = ["date", "time", "name", "phone", "procedure", "status", "source"]


def a1(tab: str, cells: str) -> str:
    safe = tab.replace("'", "''")
    return f"'{safe}'!{cells}"


def _norm_header(s: str) -> str:
    return re.sub(r"\s+", " ", (s or "").strip().lower())


def _index_to_col(idx: int) -> str:
    idx += 1
    out = ""
    while idx > 0:
        idx, r = divmod(idx - 1, 26)
        out = chr(65 + r) + out
    return out


def _col_to_idx(col: str) -> int:
    col = (col or "").strip().upper()
    n = 0
    for ch in col:
        if "A" <= ch <= "Z":
            n = n * 26 + (ord(ch) - 64)
    return n - 1


def header_map_from_row(header_row):
    """Maps canonical appointment fields to column letters found in a header row."""
    header_index = {}
    for i, cell in enumerate(header_row or []):
        key = _norm_header(cell)
        if key:
            header_index[key] = i

    out = {}
    for field, variants in APPOINTMENT_HEADERS.items():
        for v in variants:
            vkey = _norm_header(v)
            if vkey in header_index:
                out[field] = _index_to_col(header_index[vkey])
                break
    return out


def build_appointment_row(record: dict, header_map: dict):
    """
    Row values laid out by header_map when every field has a column,
    otherwise in fixed APPOINTMENT_FIELDS order (A-G).
    """
    if header_map and all(k in header_map for k in APPOINTMENT_FIELDS):
        positions = {k: _col_to_idx(header_map[k]) for k in APPOINTMENT_FIELDS}
        row = [""] * (max(positions.values()) + 1)
        for k, i in positions.items():
            row[i] = record.get(k, "")
        return row
    return [record.get(k, "") for k in APPOINTMENT_FIELDS]


class SheetsStore:
    """Append-only logging store on one spreadsheet."""

    def __init__(self, service_info, spreadsheet_id, api=None):
        self.service_info = service_info
        self.spreadsheet_id = (spreadsheet_id or "").strip()
        self.api = api

    @property
    def enabled(self):
        return self.api is not None and bool(self.spreadsheet_id)

    def init(self):
        if self.api is not None:
            return
        if not self.service_info or not self.spreadsheet_id:
            print("Service account not set or sheet id not set — Sheets disabled")
            return
        try:
            creds = build_credentials(self.service_info, SHEETS_SCOPES)
            self.api = build("sheets", "v4", credentials=creds).spreadsheets()
            print("Google Sheets initialized")
        except Exception as e:
            print("Google Sheets init failed:", repr(e))

    def append_row(self, tab: str, values) -> bool:
        if not self.enabled:
            return False
        try:
            self.api.values().append(
                spreadsheetId=self.spreadsheet_id,
                range=a1(tab, "A:Z"),
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(values)]}
            ).execute()
            return True
        except Exception as e:
            print("Sheets append FAILED:", repr(e))
            return False

    def get_header_map(self, tab: str):
        if not self.enabled:
            return None
        try:
            res = self.api.values().get(
                spreadsheetId=self.spreadsheet_id,
                range=a1(tab, "A1:Z1")
            ).execute()
            return header_map_from_row((res.get("values") or [[]])[0])
        except Exception as e:
            print("Header map read failed:", repr(e))
            return None

    def append_appointment(self, tab: str, record: dict) -> bool:
        if not self.enabled:
            return False
        header_map = self.get_header_map(tab) or {}
        return self.append_row(tab, build_appointment_row(record, header_map))

    def read_column(self, tab: str, col: str = "A", skip_header: bool = True):
        """Non-empty, stripped cell values of one column."""
        if not self.enabled:
            return []
        first_row = 2 if skip_header else 1
        try:
            res = self.api.values().get(
                spreadsheetId=self.spreadsheet_id,
                range=a1(tab, f"{col}{first_row}:{col}")
            ).execute()
        except Exception as e:
            print("Sheets read FAILED:", repr(e))
            return []
        out = []
        for row in res.get("values", []):
            if row and str(row[0]).strip():
                out.append(str(row[0]).strip())
        return out
