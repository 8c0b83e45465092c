"""Read candidate usernames from spreadsheets and CSV files."""

import csv
import io
import zipfile
from pathlib import Path

import pandas as pd
from xlrd import XLRDError

from instacheck.exceptions import ImportFileError, UnsupportedFileError

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}
CSV_SUFFIXES = frozenset({".csv"})
SUPPORTED_SUFFIXES = frozenset(EXCEL_ENGINES) | CSV_SUFFIXES


def _check_suffix(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(
            f"Unsupported file type '{suffix or filename}'. "
            f"Use one of: {', '.join(sorted(SUPPORTED_SUFFIXES))}"
        )
    return suffix


def _read_csv_grid(text: str) -> pd.DataFrame:
    """
    Parse CSV text as a headerless grid sized to its widest row.

    Purely numeric cells are blanked, matching how spreadsheet readers
    type them as numbers rather than text.
    """
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return pd.DataFrame()
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=range(width),
        dtype=str,
        keep_default_na=False,
    )
    numeric = df.apply(lambda col: pd.to_numeric(col, errors="coerce")).notna()
    return df.mask(numeric)


def _read_grid(data: bytes, suffix: str, name: str) -> pd.DataFrame:
    """Load the first sheet (or the CSV) as a headerless grid."""
    try:
        if suffix in CSV_SUFFIXES:
            return _read_csv_grid(data.decode("utf-8-sig"))
        return pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            dtype=object,
            engine=EXCEL_ENGINES[suffix],
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (ValueError, zipfile.BadZipFile, XLRDError) as e:
        # UnicodeDecodeError and pandas ParserError are ValueErrors
        raise ImportFileError(f"Could not read {name}: {e}") from e


def grid_cells(df: pd.DataFrame) -> list[str]:
    """
    Flatten a grid row by row into its non-empty string cells.

    Args:
        df: Headerless grid as read from a sheet

    Returns:
        Cell texts in reading order; numbers, blanks and NaN are skipped
    """
    cells = []
    for row in df.itertuples(index=False):
        for cell in row:
            if isinstance(cell, str) and cell.strip():
                cells.append(cell)
    return cells


def read_cells(filepath: str | Path) -> list[str]:
    """
    Read every non-empty string cell from a spreadsheet or CSV file.

    Args:
        filepath: Path to a .xlsx, .xlsm, .xls or .csv file

    Returns:
        Raw cell texts, not yet normalized

    Raises:
        UnsupportedFileError: If the extension is not supported
        ImportFileError: If the file cannot be read
    """
    path = Path(filepath)
    suffix = _check_suffix(path.name)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImportFileError(f"Could not read {path.name}: {e}") from e
    if not data:
        return []
    return grid_cells(_read_grid(data, suffix, path.name))


def read_cells_from_bytes(data: bytes, filename: str) -> list[str]:
    """
    Read non-empty string cells from an uploaded file's content.

    Args:
        data: Raw file bytes
        filename: Original filename, used to pick the reader

    Returns:
        Raw cell texts, not yet normalized
    """
    suffix = _check_suffix(filename)
    if not data:
        return []
    return grid_cells(_read_grid(data, suffix, filename))
