"""Identifier normalization and defensive scalar coercion.

Upstream payloads are loosely typed: ids arrive as variable-width strings or
numbers, amounts as numbers or numeric strings, and any field may be missing.
This module states the default-value policy once so model validators and
filters never re-implement it at the access site:

- ids: zero-padded strings (2 digits for categories, 4 for subcategories)
- text: ``""`` when absent
- amounts/quantities: ``Decimal("0")`` when absent or unparsable
- nested record lists: empty when absent; non-mapping entries dropped
- timestamps: ``None`` when absent or unparsable (comparisons fail closed)
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel

CATEGORY_ID_WIDTH = 2
SUBCATEGORY_ID_WIDTH = 4

_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


def _pad_id(value: Any, width: int) -> str:
    if value is None or isinstance(value, bool):
        raise ValueError(f"invalid identifier: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    s = str(value).strip()
    if not s:
        raise ValueError("identifier is empty")
    return s.rjust(width, "0")


def normalize_category_id(value: Any) -> str:
    """Return ``value`` as a 2-digit zero-padded category id.

    Idempotent: ``3``, ``3.0``, ``"3"`` and ``"03"`` all normalize to ``"03"``.
    Longer values are never truncated.
    """

    return _pad_id(value, CATEGORY_ID_WIDTH)


def normalize_subcategory_id(value: Any) -> str:
    """Return ``value`` as a 4-digit zero-padded subcategory id (``7`` -> ``"0007"``)."""

    return _pad_id(value, SUBCATEGORY_ID_WIDTH)


def _id_or_blank(value: Any, width: int) -> str:
    # Ingestion variant: missing or non-scalar ids (bools, lists, NaN) stay blank
    # so one malformed record cannot reject the whole payload.
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, str) and not value.strip():
        return ""
    return _pad_id(value, width)


def category_id_or_blank(value: Any) -> str:
    return _id_or_blank(value, CATEGORY_ID_WIDTH)


def subcategory_id_or_blank(value: Any) -> str:
    return _id_or_blank(value, SUBCATEGORY_ID_WIDTH)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def as_decimal(value: Any) -> Decimal:
    """Coerce ``value`` to ``Decimal``; absent or invalid values become ``0``.

    Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")`` rather than
    its binary expansion. Non-finite results (``NaN``/``Infinity``) also
    default to zero.
    """

    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        d = value
    else:
        s = str(value).strip().replace(",", "")
        if not s:
            return _ZERO
        try:
            d = Decimal(s)
        except InvalidOperation:
            return _ZERO
    return d if d.is_finite() else _ZERO


def as_records(value: Any) -> list[Any]:
    """Return the mapping (or already-validated model) entries of ``value``.

    ``None`` and non-sequence values yield an empty list; stray scalars inside
    the sequence are dropped so one bad entry cannot abort the whole payload.
    """

    if value is None or isinstance(value, (str, bytes)):
        return []
    if isinstance(value, Mapping):
        # Object-shaped collections ({"0": {...}, "1": {...}}) use their values.
        value = list(value.values())
    if not isinstance(value, Sequence):
        return []
    return [item for item in value if isinstance(item, (Mapping, BaseModel))]


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, epoch milliseconds or ``datetime``.

    Returns a timezone-aware ``datetime`` (naive inputs are taken as UTC) or
    ``None`` when the value cannot be interpreted.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


__all__ = [
    "CATEGORY_ID_WIDTH",
    "SUBCATEGORY_ID_WIDTH",
    "normalize_category_id",
    "normalize_subcategory_id",
    "category_id_or_blank",
    "subcategory_id_or_blank",
    "as_text",
    "as_decimal",
    "as_records",
    "parse_timestamp",
    "blank_to_none",
]
