import csv
import io
import zipfile
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from certivo.core.exceptions import ValidationError


# (original 1-based sheet row number, {column header: trimmed cell text})
ImportRow = Tuple[int, Dict[str, str]]

ALLOWED_IMPORT_EXTENSIONS = {
    "xlsx", "xlsm",  # Excel workbooks (first sheet only)
    "csv",
}


def validate_import_file_extension(filename: str) -> str:
    """
    Validates that the uploaded file is a supported spreadsheet.
    Returns the lower-cased extension.
    """
    if not filename:
        raise ValidationError("Filename is required for imports.")

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext not in ALLOWED_IMPORT_EXTENSIONS:
        raise ValidationError(
            f"File extension '.{ext}' is not supported for imports. Allowed extensions: "
            + ", ".join(sorted(ALLOWED_IMPORT_EXTENSIONS))
        )
    return ext


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _rows_from_table(table: Iterable[Tuple[Any, ...]], first_data_row: int = 2) -> List[ImportRow]:
    iterator = iter(table)
    header_cells = next(iterator, None)
    if not header_cells:
        return []

    headers = [_cell_text(h) for h in header_cells]
    rows: List[ImportRow] = []

    for row_number, cells in enumerate(iterator, start=first_data_row):
        values = [_cell_text(c) for c in cells]
        if not any(values):
            continue
        record = {
            header: (values[i] if i < len(values) else "")
            for i, header in enumerate(headers)
            if header
        }
        rows.append((row_number, record))

    return rows


def _read_xlsx(content: bytes) -> List[ImportRow]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise ValidationError(f"Could not read Excel file: {e}")

    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]
        return _rows_from_table(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()


def _read_csv(content: bytes) -> List[ImportRow]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded.")

    try:
        return _rows_from_table(csv.reader(io.StringIO(text)))
    except csv.Error as e:
        raise ValidationError(f"Could not read CSV file: {e}")


def read_import_rows(filename: Optional[str], content: bytes) -> List[ImportRow]:
    """
    Parses an uploaded import file into data rows keyed by header.

    Fully empty rows are dropped; kept rows carry their original sheet row
    number (the header is row 1) for error reporting.

    Raises:
        ValidationError: unsupported extension, unreadable content, or no data rows.
    """
    ext = validate_import_file_extension(filename or "")

    if not content:
        raise ValidationError("Uploaded file is empty.")

    rows = _read_csv(content) if ext == "csv" else _read_xlsx(content)

    if not rows:
        raise ValidationError("No rows found in the uploaded sheet.")

    return rows
