"""Cell conversion helpers shared by the loader and report."""

import pandas as pd


def safe_int(value, default: int = 0) -> int:
    """Safely convert a table cell to integer.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Integer value
    """
    if value is None or pd.isna(value):
        return default
    if isinstance(value, str) and not value.strip():
        return default
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default


def safe_str(value, default: str = "") -> str:
    """Safely convert a table cell to a stripped string.

    Args:
        value: Value to convert
        default: Default value for missing cells

    Returns:
        String value
    """
    if value is None or pd.isna(value):
        return default
    return str(value).strip()
