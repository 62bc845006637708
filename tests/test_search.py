from src.teams.search import UNASSIGNED_LABEL, find_participant

COLORS = {"Azul": {"color": "#3B82F6", "bg": "#DBEAFE"}}


def test_blank_query_returns_none(columns, five_records):
    assert find_participant(five_records, columns, "   ", {}) is None


def test_finds_by_partial_name(columns, five_records):
    result = find_participant(five_records, columns, "  LOPEZ", {"ana lopez": "Azul"}, COLORS)
    assert result["participant"]["NOMBRE Y APELLIDO"] == "Ana Lopez"
    assert result["team"] == "Azul"
    assert result["color"] == COLORS["Azul"]


def test_finds_by_phone(columns, five_records):
    result = find_participant(five_records, columns, "0003", {"luis gomez": "Rojo"})
    assert result["participant"]["NOMBRE Y APELLIDO"] == "Luis Gomez"
    assert result["team"] == "Rojo"
    assert result["color"] is None


def test_unassigned_participant(columns, five_records):
    result = find_participant(five_records, columns, "maria", {})
    assert result["team"] == UNASSIGNED_LABEL


def test_no_match(columns, five_records):
    assert find_participant(five_records, columns, "zzz", {}) == {"not_found": True}
