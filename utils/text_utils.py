"""
Text utilities for matching select-option labels.

Option labels typed by hand in Airtable drift in case and spacing
("Whole Nuts", "whole nuts", " Whole  Nuts "); they are compared in
normalized form.
"""

import re
from itertools import islice
from typing import Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_option_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize a select-option label for comparison.

    - " Whole   Nuts " → "whole nuts"
    - "MIXES" → "mixes"

    Args:
        name: Label as typed (may be None)

    Returns:
        Case-folded label with whitespace runs collapsed and ends trimmed,
        or None if input is empty
    """
    if name is None:
        return None

    collapsed = _WHITESPACE_RUN.sub(" ", str(name)).strip()

    if not collapsed:
        return None

    return collapsed.casefold()


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """
    Yield consecutive lists of at most `size` items.

    chunked(range(23), 10) → sizes 10, 10, 3
    """
    if size < 1:
        raise ValueError("chunk size must be at least 1")

    it = iter(items)
    while True:
        batch = list(islice(it, size))
        if not batch:
            return
        yield batch
