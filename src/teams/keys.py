import json


# Column sniffing: source spreadsheets come from hand-edited forms, so headers
# are matched by fragment rather than by exact name.
NAME_MARKERS = ("nombre", "apellido")
PHONE_MARKERS = ("celular", "telefono")
GENDER_MARKERS = ("genero", "género", "sexo", "gender")
PAYMENT_MARKER = "pago"


def find_name_column(columns):
    """First column whose header mentions both first and last name."""
    for col in columns:
        lowered = str(col).lower()
        if all(marker in lowered for marker in NAME_MARKERS):
            return col
    return None


def find_phone_column(columns):
    for col in columns:
        lowered = str(col).lower()
        if any(marker in lowered for marker in PHONE_MARKERS):
            return col
    return None


def find_gender_column(columns):
    for col in columns:
        lowered = str(col).lower()
        if any(marker in lowered for marker in GENDER_MARKERS):
            return col
    return None


def find_payment_column(columns):
    for col in columns:
        if PAYMENT_MARKER in str(col).lower():
            return col
    return None


def _value(record, column):
    if column is None:
        return ""
    value = record.get(column)
    if value is None:
        return ""
    return str(value).strip()


def participant_key(record, columns):
    """
    Stable identity for a participant across re-imports.

    Name (lower-cased) first, then phone (case kept), then the first column,
    and as a last resort the whole record serialized.
    """
    name = _value(record, find_name_column(columns))
    if name:
        return name.lower()

    phone = _value(record, find_phone_column(columns))
    if phone:
        return phone

    first = _value(record, columns[0]) if columns else ""
    if first:
        return first
    return json.dumps(record, ensure_ascii=False)


def display_name(record, columns):
    name_col = find_name_column(columns)
    if name_col is None and columns:
        name_col = columns[0]
    return _value(record, name_col)
