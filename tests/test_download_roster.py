from unittest.mock import patch
from urllib.error import URLError

import pandas as pd
import pytest
from openpyxl import Workbook

from src.step_01_download_roster import (
    RosterImportError,
    convert_google_sheets_url,
    download_roster,
    load_from_excel_file,
    load_from_google_sheets,
)


def test_convert_google_sheets_url():
    url = "https://docs.google.com/spreadsheets/d/1X1pIEOd_UPsGj-DVw/edit?usp=sharing"
    assert convert_google_sheets_url(url) == (
        "https://docs.google.com/spreadsheets/d/1X1pIEOd_UPsGj-DVw/gviz/tq?tqx=out:csv"
    )


def test_other_urls_pass_through():
    assert convert_google_sheets_url("https://example.com/roster.csv") == "https://example.com/roster.csv"


def test_csv_values_stay_text(tmp_path):
    p = tmp_path / "roster.csv"
    p.write_text(
        "NOMBRE Y APELLIDO,ESCRIBE TU NUMERO DE CELULAR,SELECCIONA TU GENERO\n"
        "Ana Lopez,0991234567,Femenino\n"
        "\n"
        "Juan Perez,,Masculino\n",
        encoding="utf-8",
    )
    records, columns = load_from_google_sheets(str(p))

    assert columns == ["NOMBRE Y APELLIDO", "ESCRIBE TU NUMERO DE CELULAR", "SELECCIONA TU GENERO"]
    assert len(records) == 2
    # Leading zero kept, missing cell as empty text
    assert records[0]["ESCRIBE TU NUMERO DE CELULAR"] == "0991234567"
    assert records[1]["ESCRIBE TU NUMERO DE CELULAR"] == ""


def test_csv_without_rows_is_an_import_error(tmp_path):
    p = tmp_path / "empty.csv"
    p.write_text("NOMBRE Y APELLIDO,SELECCIONA TU GENERO\n", encoding="utf-8")
    with pytest.raises(RosterImportError):
        load_from_google_sheets(str(p))


def test_unreachable_sheet_is_an_import_error():
    with patch("src.step_01_download_roster.pd.read_csv", side_effect=URLError("no route")):
        with pytest.raises(RosterImportError, match="No se pudo acceder"):
            load_from_google_sheets("https://docs.google.com/spreadsheets/d/abc/edit")


def test_google_link_is_fetched_as_csv():
    frame = pd.DataFrame([{"NOMBRE Y APELLIDO": "Ana Lopez"}])
    with patch("src.step_01_download_roster.pd.read_csv", return_value=frame) as mock_read:
        records, columns = load_from_google_sheets("https://docs.google.com/spreadsheets/d/abc/edit")
    assert mock_read.call_args[0][0] == "https://docs.google.com/spreadsheets/d/abc/gviz/tq?tqx=out:csv"
    assert records == [{"NOMBRE Y APELLIDO": "Ana Lopez"}]


def test_excel_upload(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.append(["NOMBRE Y APELLIDO", "ESCRIBE TU NUMERO DE CELULAR", "SELECCIONA TU GENERO"])
    ws.append(["Ana Lopez", 5551234, "Femenino"])
    ws.append([None, None, None])
    ws.append(["Juan Perez", None, "Masculino"])
    path = tmp_path / "inscritos.xlsx"
    wb.save(path)

    records, columns = download_roster(str(path))

    assert columns[0] == "NOMBRE Y APELLIDO"
    assert [r["NOMBRE Y APELLIDO"] for r in records] == ["Ana Lopez", "Juan Perez"]
    assert records[0]["ESCRIBE TU NUMERO DE CELULAR"] == "5551234"
    assert records[1]["ESCRIBE TU NUMERO DE CELULAR"] == ""


def test_excel_with_header_only(tmp_path):
    wb = Workbook()
    wb.active.append(["NOMBRE Y APELLIDO"])
    path = tmp_path / "vacio.xlsx"
    wb.save(path)
    with pytest.raises(RosterImportError):
        load_from_excel_file(path)


def test_missing_excel_file(tmp_path):
    with pytest.raises(RosterImportError):
        load_from_excel_file(tmp_path / "nope.xlsx")


def test_corrupt_workbook_is_an_import_error(tmp_path):
    path = tmp_path / "inscritos.xlsx"
    path.write_bytes(b"this is not a zip workbook")
    with pytest.raises(RosterImportError, match="Error al leer"):
        download_roster(str(path))


def test_csv_in_wrong_encoding_is_an_import_error(tmp_path):
    p = tmp_path / "latin1.csv"
    p.write_bytes("NOMBRE Y APELLIDO\nJosé Pérez\n".encode("latin-1"))
    with pytest.raises(RosterImportError, match="no tiene datos válidos"):
        load_from_google_sheets(str(p))
