from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


def to_db_value(value: Any) -> Any:
    """Convert a pandas/numpy cell into a value a DB-API driver can bind."""
    if value is None:
        return None

    if isinstance(value, np.generic):
        value = value.item()

    if not isinstance(value, (str, bytes)):
        try:
            if pd.isna(value):
                return None
        except (TypeError, ValueError):
            pass

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()

    if isinstance(value, pd.Timedelta):
        return value.to_pytimedelta()

    return value
