"""Header-delimited CSV loading with polars.

Every column is read as text; typing is left to the field normalizers so
that one malformed cell cannot fail a whole file.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import polars as pl

from marketgame.core.exceptions import InvalidDataFormatError
from marketgame.core.logging import get_logger

logger = get_logger(__name__)


def load_frame(path: Path) -> pl.DataFrame:
    """Read a CSV export into a string-typed DataFrame.

    Header names are trimmed, fully blank rows are dropped and missing
    cells become empty strings.

    Args:
        path: CSV file to read.

    Returns:
        DataFrame with one ``pl.String`` column per header field.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidDataFormatError: If polars cannot parse the file or two
            header fields are equal once trimmed.
    """
    if not path.is_file():
        raise FileNotFoundError(str(path))

    try:
        df = pl.read_csv(
            path,
            has_header=True,
            infer_schema_length=0,
            truncate_ragged_lines=True,
            encoding="utf8-lossy",
        )
    except pl.exceptions.NoDataError:
        logger.warning("csv_file_empty", path=str(path))
        return pl.DataFrame()
    except pl.exceptions.ComputeError as e:
        raise InvalidDataFormatError(
            f"Could not parse CSV file {path.name}: {e}",
            path=str(path),
        ) from e

    try:
        df = df.rename({column: column.lstrip("\ufeff").strip() for column in df.columns})
    except pl.exceptions.DuplicateError as e:
        raise InvalidDataFormatError(
            f"Duplicate header in CSV file {path.name}: {e}",
            path=str(path),
        ) from e
    df = df.with_columns(pl.all().fill_null(""))
    if df.width == 0 or df.height == 0:
        return df

    blank = pl.all_horizontal(
        pl.all().cast(pl.String).str.strip_chars() == ""
    )
    return df.filter(~blank)


def read_csv_rows(
    path: Path,
    required_columns: Iterable[str] = (),
) -> list[dict[str, str]]:
    """Read a CSV export as a list of header-keyed row mappings.

    Args:
        path: CSV file to read.
        required_columns: Header fields that must be present.

    Returns:
        One ``{column: text}`` mapping per non-blank row, in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidDataFormatError: If a required column is missing.
    """
    df = load_frame(path)

    missing = [column for column in required_columns if column not in df.columns]
    if missing and df.width > 0:
        raise InvalidDataFormatError(
            f"{path.name} is missing columns: {', '.join(missing)}",
            path=str(path),
            missing_columns=missing,
        )
    if df.height == 0:
        return []

    rows: list[dict[str, str]] = []
    for row in df.iter_rows(named=True):
        rows.append({key: value if value is not None else "" for key, value in row.items()})

    logger.debug("csv_rows_read", path=str(path), rows=len(rows), columns=df.width)
    return rows
