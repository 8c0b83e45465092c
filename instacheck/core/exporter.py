"""Export utilities for username check results."""

import io
from pathlib import Path

import pandas as pd

from instacheck.config import DEFAULT_EXPORT_PATH, DEFAULT_SHEET_NAME
from instacheck.models.record import UsernameRecord

EXPORT_COLUMNS = ["Username", "Is Page Open?", "Availability", "Notes", "Profile URL"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def to_row(record: UsernameRecord) -> dict:
    """
    Convert a record to one export row.

    Args:
        record: UsernameRecord to convert

    Returns:
        Dict keyed by the export column names
    """
    return {
        "Username": record.username,
        "Is Page Open?": record.is_page_open,
        "Availability": record.availability,
        "Notes": record.notes or "",
        "Profile URL": record.profile_url or "",
    }


def to_dataframe(records: list[UsernameRecord]) -> pd.DataFrame:
    """
    Convert records to a DataFrame with the export columns.

    Args:
        records: Records in display order

    Returns:
        DataFrame with one row per record
    """
    return pd.DataFrame([to_row(r) for r in records], columns=EXPORT_COLUMNS)


def save_xlsx(
    records: list[UsernameRecord],
    filepath: str | Path = DEFAULT_EXPORT_PATH,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> Path:
    """
    Save records to a single-sheet Excel workbook.

    Args:
        records: Records to export
        filepath: Output file path
        sheet_name: Name of the only sheet

    Returns:
        Path to saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_dataframe(records).to_excel(path, sheet_name=sheet_name, index=False, engine="openpyxl")
    return path


def to_xlsx_bytes(
    records: list[UsernameRecord],
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> bytes:
    """Render the export workbook in memory, for downloads."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        to_dataframe(records).to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def save_csv(records: list[UsernameRecord], filepath: str | Path) -> Path:
    """
    Save records to a CSV file with the export columns.

    Args:
        records: Records to export
        filepath: Output file path

    Returns:
        Path to saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_dataframe(records).to_csv(path, index=False)
    return path


def load_xlsx(filepath: str | Path, sheet_name: str = DEFAULT_SHEET_NAME) -> pd.DataFrame:
    """
    Load a previously exported workbook.

    Args:
        filepath: Path to the .xlsx file
        sheet_name: Sheet to read

    Returns:
        DataFrame with the export columns, blanks as empty strings
    """
    return pd.read_excel(
        filepath,
        sheet_name=sheet_name,
        dtype=str,
        keep_default_na=False,
        engine="openpyxl",
    )
