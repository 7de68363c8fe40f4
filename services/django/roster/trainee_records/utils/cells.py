import math
from typing import Any, Optional, Sequence

import pandas as pd


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    # pandas returns arrays for list-like input; those are real values.
    if pd.api.types.is_scalar(value):
        return bool(pd.isna(value))
    return False


def cell_text(value: Any) -> str:
    """
    Render a spreadsheet cell as text.

    Excel stores trainee numbers as floats, so integral floats lose their
    ``.0`` suffix; ``12345.0`` must sanitize to ``12345``, not ``123450``.
    """
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cell_at(row: Sequence[Any], index: int) -> Any:
    if row is None or index < 0 or index >= len(row):
        return None
    return row[index]


def clean_text(value: Any, *, max_length: Optional[int] = None) -> str:
    text = cell_text(value).strip()
    if max_length is not None:
        return text[:max_length]
    return text
