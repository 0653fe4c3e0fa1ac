from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ..models.row_data import RowData

"""Employee workbook reader.

- First worksheet only; 1行目をヘッダ行として扱い、2行目以降をデータ行。
- Rows are yielded lazily in sheet order; completely empty rows are skipped.
- Cell text is kept verbatim (pandas default NA strings are disabled) so that
  values such as "NA" survive; configured null sentinels become None instead.
"""

__all__ = [
    "MalformedFileError",
    "HEADER_ROW_OFFSET",
    "read_first_sheet",
    "iter_sheet_rows",
    "read_employee_rows",
]

# 先頭データ行のスプレッドシート行番号 (ヘッダ = 1 行目)
HEADER_ROW_OFFSET = 2


class MalformedFileError(Exception):
    """Raised when the upload cannot be parsed as a tabular workbook."""


def read_first_sheet(source: Path | str | bytes) -> pd.DataFrame:
    """Read the first worksheet of a workbook as a raw DataFrame (no header applied).

    Parameters
    ----------
    source: ファイルパス または アップロードされたバイト列
    """
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise MalformedFileError("uploaded file is empty")
        handle: Any = io.BytesIO(source)
    else:
        handle = Path(source)
    try:
        xls = pd.ExcelFile(handle, engine="openpyxl")
        if not xls.sheet_names:
            raise MalformedFileError("workbook contains no worksheets")
        return xls.parse(xls.sheet_names[0], header=None, keep_default_na=False)
    except MalformedFileError:
        raise
    except Exception as e:
        raise MalformedFileError(f"unable to read workbook: {e}") from e


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clean_value(value: Any, null_sentinels: set[str] | None) -> Any:
    if _is_blank(value):
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, str):
        stripped = value.strip()
        # NULL サニタイズ
        if null_sentinels and stripped.upper() in null_sentinels:
            return None
        return stripped
    return value


def iter_sheet_rows(
    df: pd.DataFrame,
    null_sentinels: Iterable[str] | None = None,
) -> Iterator[RowData]:
    """Yield RowData for every non-empty data row of a raw sheet DataFrame.

    Row numbers follow the order rows are yielded: the first yielded row is
    row 2, the next row 3 and so on (empty rows do not consume a number).
    """
    if df.shape[0] == 0:
        return
    sentinels = {s.strip().upper() for s in null_sentinels} if null_sentinels else None
    header = df.iloc[0].tolist()
    columns: list[tuple[int, str]] = [
        (idx, str(name).strip()) for idx, name in enumerate(header) if not _is_blank(name)
    ]
    ordinal = HEADER_ROW_OFFSET
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values = {col: _clean_value(raw[idx], sentinels) for idx, col in columns}
        if all(v is None for v in values.values()):
            continue
        yield RowData(row_number=ordinal, values=values)
        ordinal += 1


def read_employee_rows(
    source: Path | str | bytes,
    null_sentinels: Iterable[str] | None = None,
) -> Iterator[RowData]:
    """Open the workbook eagerly and return a lazy iterator over its data rows.

    The workbook is parsed before this function returns, so MalformedFileError
    is raised before any row reaches the pipeline.
    """
    df = read_first_sheet(source)
    return iter_sheet_rows(df, null_sentinels)
