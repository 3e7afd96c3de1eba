"""Normalization utilities for table headers and person names."""

import re
from collections.abc import Iterable

import pandas as pd

from .constants import ADVISOR_SEPARATOR

# Honorific and academic-title prefixes removed before matching person names.
# Thai titles come from the school's own data; English ones cover imported sheets.
DEFAULT_HONORIFIC_PREFIXES = [
    "ว่าที่ร้อยตรี",  # acting sub-lieutenant
    "นางสาว",  # Miss
    "นาง",  # Mrs.
    "นาย",  # Mr.
    "ครู",  # teacher
    "ดร.",  # Dr.
    "ผศ.",  # assistant professor
    "Mrs.",
    "Mr.",
    "Ms.",
    "Dr.",
    "Prof.",
]

_BOM = "\ufeff"


def clean_header(header: str) -> str:
    """Normalize a CSV column header.

    Trims whitespace, strips a leading byte-order mark, collapses internal
    whitespace runs to a single underscore and lowercases the result, so that
    " Subject ID" and "\\ufeffsubject_id" both become "subject_id".

    Args:
        header: Raw header text

    Returns:
        Normalized header
    """
    cleaned = str(header).strip().lstrip(_BOM).strip()
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned.lower()


def normalize_person_name(
    name: str | None, prefixes: Iterable[str] | None = None
) -> str:
    """Reduce a person name to the token used for advisor matching.

    Removes honorific prefixes (repeatedly, so stacked titles such as
    "ผศ.ดร." are both stripped) and returns the first whitespace-separated
    token of what remains.

    Args:
        name: Raw name, possibly with titles
        prefixes: Prefixes to strip. Defaults to DEFAULT_HONORIFIC_PREFIXES

    Returns:
        First name token, or empty string for blank input
    """
    if name is None or pd.isna(name):
        return ""

    candidates = sorted(
        prefixes if prefixes is not None else DEFAULT_HONORIFIC_PREFIXES,
        key=len,
        reverse=True,
    )
    cleaned = str(name).strip()

    stripped = True
    while stripped and cleaned:
        stripped = False
        for prefix in candidates:
            if prefix and cleaned.startswith(prefix):
                cleaned = cleaned[len(prefix) :].lstrip()
                stripped = True
                break

    tokens = cleaned.split()
    return tokens[0] if tokens else ""


def split_advisor_names(raw: str | None) -> list[str]:
    """Split the group table's advisor column into individual names."""
    if raw is None or pd.isna(raw):
        return []
    return [part.strip() for part in str(raw).split(ADVISOR_SEPARATOR) if part.strip()]
