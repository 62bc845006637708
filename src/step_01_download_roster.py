import re
import sys
import zipfile
from urllib.error import URLError

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException


class RosterImportError(Exception):
    """The roster could not be fetched or holds no participants."""


SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9-_]+)")


def convert_google_sheets_url(url):
    """Turn a Google Sheets share link into its CSV export URL. Other URLs pass through."""
    if "docs.google.com/spreadsheets" in url:
        match = SHEET_ID_PATTERN.search(url)
        if match:
            return f"https://docs.google.com/spreadsheets/d/{match.group(1)}/gviz/tq?tqx=out:csv"
    return url


def _frame_to_records(df):
    # Every cell as text, missing cells as ""
    df = df.dropna(how="all")
    df = df.fillna("").astype(str)
    df = df[(df != "").any(axis=1)]

    columns = [str(c) for c in df.columns]
    df.columns = columns
    records = df.to_dict(orient="records")
    if not records:
        raise RosterImportError("El archivo está vacío o no tiene datos válidos.")
    return records, columns


def load_from_google_sheets(url):
    """Fetch a public sheet (or any CSV URL). Returns (records, columns)."""
    csv_url = convert_google_sheets_url(url)
    try:
        df = pd.read_csv(csv_url, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (URLError, OSError) as e:
        raise RosterImportError(f"No se pudo acceder al archivo: {e}") from e
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise RosterImportError(f"El archivo está vacío o no tiene datos válidos: {e}") from e
    return _frame_to_records(df)


def load_from_excel_file(source):
    """Read the first sheet of an uploaded workbook (path or file-like). Returns (records, columns)."""
    try:
        df = pd.read_excel(source, sheet_name=0, dtype=str, engine='openpyxl')
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise RosterImportError(f"Error al leer el archivo: {e}") from e
    if df.columns.empty:
        raise RosterImportError("Archivo vacío o sin encabezados.")
    return _frame_to_records(df)


def download_roster(source):
    if str(source).lower().endswith((".xlsx", ".xlsm")):
        return load_from_excel_file(source)
    return load_from_google_sheets(source)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: step_01_download_roster.py <sheet url | file.xlsx>")
        sys.exit(1)
    try:
        records, columns = download_roster(sys.argv[1])
    except RosterImportError as e:
        print(f"Error downloading roster: {e}")
        sys.exit(1)
    print(f"{len(records)} participantes cargados.")
    print(f"Columns: {columns}")
