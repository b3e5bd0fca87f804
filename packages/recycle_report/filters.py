"""Filter pipeline over side-tagged transactions.

Each stage is a pure function ``Sequence[Transaction] -> list[Transaction]``
that returns new ``Transaction``/``Group`` values and never touches its input.
:func:`apply_filters` composes the active stages in a fixed order; the order
matters because later stages see the ``request_list`` already reshaped by
earlier ones:

1. transaction fields (date bounds, exact order id)
2. category
3. subcategory / grade / price on line items
4. keyword (order id or subcategory name)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal
from functools import partial, reduce
from typing import Any

from .logging_setup import get_logger
from .models import Group, LineItem, SearchFilters, Transaction
from .normalizers import parse_timestamp
from .taxonomy import TaxonomyIndex

type Stage = Callable[[Sequence[Transaction]], list[Transaction]]

_logger = get_logger("recycle_report.filters")


# ---------------------------------------------------------------------------
# Stage 1: transaction-level fields
# ---------------------------------------------------------------------------


def _within(
    finished: datetime | None, start: datetime | None, end: datetime | None
) -> bool:
    if finished is None:
        return False
    if start is not None and finished < start:
        return False
    if end is not None and finished > end:
        return False
    return True


def filter_transaction_fields(
    transactions: Sequence[Transaction],
    *,
    start_date: Any = None,
    end_date: Any = None,
    order_id: str | None = None,
) -> list[Transaction]:
    """Keep transactions inside the date bounds and with the exact order id.

    A bound that cannot be parsed, or a record without a parseable
    ``orderFinishedDate``, never matches: the record is excluded.
    """

    start = parse_timestamp(start_date) if start_date is not None else None
    end = parse_timestamp(end_date) if end_date is not None else None
    if (start_date is not None and start is None) or (end_date is not None and end is None):
        _logger.warning(
            "filters:unparsable_date_bound start_date=%r end_date=%r", start_date, end_date
        )
        return []

    check_dates = start is not None or end is not None
    out: list[Transaction] = []
    for t in transactions:
        if check_dates and not _within(t.order_finished_date, start, end):
            continue
        if order_id is not None and t.order_id != order_id:
            continue
        out.append(t)
    return out


# ---------------------------------------------------------------------------
# Stage 2: category
# ---------------------------------------------------------------------------


def filter_by_category(
    transactions: Sequence[Transaction], category_id: str
) -> list[Transaction]:
    """Keep only groups of ``category_id`` (normalized); drop emptied transactions."""

    out: list[Transaction] = []
    for t in transactions:
        groups = tuple(g for g in t.request_list if g.category_id == category_id)
        if groups:
            out.append(t.model_copy(update={"request_list": groups}))
    return out


# ---------------------------------------------------------------------------
# Stage 3: subcategory / grade / price
# ---------------------------------------------------------------------------


def _line_item_passes(
    item: LineItem,
    *,
    grade: str | None,
    min_price: Decimal | None,
    max_price: Decimal | None,
) -> bool:
    if grade is not None and item.grade != grade:
        return False
    if min_price is not None and item.total < min_price:
        return False
    if max_price is not None and item.total > max_price:
        return False
    return True


def filter_line_items(
    transactions: Sequence[Transaction],
    *,
    sub_category_id: str | None = None,
    grade: str | None = None,
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
) -> list[Transaction]:
    """Narrow each group's line items; drop emptied groups, then emptied transactions.

    The subcategory test is per group: a group of another subcategory loses
    all of its line items.
    """

    out: list[Transaction] = []
    for t in transactions:
        groups: list[Group] = []
        for g in t.request_list:
            if sub_category_id is not None and g.sub_category_id != sub_category_id:
                continue
            items = tuple(
                item
                for item in g.request_list
                if _line_item_passes(item, grade=grade, min_price=min_price, max_price=max_price)
            )
            if items:
                groups.append(g.model_copy(update={"request_list": items}))
        if groups:
            out.append(t.model_copy(update={"request_list": tuple(groups)}))
    return out


# ---------------------------------------------------------------------------
# Stage 4: keyword
# ---------------------------------------------------------------------------


def filter_by_keyword(
    transactions: Sequence[Transaction], keyword: str, taxonomy: TaxonomyIndex
) -> list[Transaction]:
    """Case-insensitive keyword match on order id or subcategory name.

    Groups whose subcategory name contains the keyword are kept. A transaction
    whose order id contains the keyword but has no name-matched group is kept
    whole, with the ``request_list`` it had when entering this stage.
    """

    if not keyword.strip():
        return list(transactions)
    needle = keyword.lower()

    out: list[Transaction] = []
    for t in transactions:
        matches_order_id = needle in t.order_id.lower()
        groups = tuple(
            g
            for g in t.request_list
            if needle in _subcategory_name(taxonomy, g).lower()
        )
        if groups:
            out.append(t.model_copy(update={"request_list": groups}))
        elif matches_order_id:
            out.append(t)
    return out


def _subcategory_name(taxonomy: TaxonomyIndex, group: Group) -> str:
    sub = taxonomy.lookup_subcategory(group.category_id, group.sub_category_id)
    return sub.sub_category_name if sub is not None else ""


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def build_stages(filters: SearchFilters, taxonomy: TaxonomyIndex) -> list[tuple[str, Stage]]:
    """Return the named stages that ``filters`` activates, in pipeline order."""

    stages: list[tuple[str, Stage]] = []
    if any(v is not None for v in (filters.start_date, filters.end_date, filters.order_id)):
        stages.append(
            (
                "transaction_fields",
                partial(
                    filter_transaction_fields,
                    start_date=filters.start_date,
                    end_date=filters.end_date,
                    order_id=filters.order_id,
                ),
            )
        )
    if filters.category_id is not None:
        stages.append(("category", partial(filter_by_category, category_id=filters.category_id)))
    if filters.has_line_item_filters:
        stages.append(
            (
                "line_items",
                partial(
                    filter_line_items,
                    sub_category_id=filters.sub_category_id,
                    grade=filters.grade,
                    min_price=filters.min_price,
                    max_price=filters.max_price,
                ),
            )
        )
    if filters.keyword is not None and filters.keyword.strip():
        stages.append(
            ("keyword", partial(filter_by_keyword, keyword=filters.keyword, taxonomy=taxonomy))
        )
    return stages


def apply_filters(
    transactions: Sequence[Transaction],
    filters: SearchFilters | None,
    taxonomy: TaxonomyIndex,
) -> list[Transaction]:
    """Run every active stage over ``transactions`` and return the survivors."""

    if filters is None:
        return list(transactions)

    def _run(acc: list[Transaction], named: tuple[str, Stage]) -> list[Transaction]:
        name, stage = named
        result = stage(acc)
        _logger.debug("filters:stage name=%s in=%d out=%d", name, len(acc), len(result))
        return result

    return reduce(_run, build_stages(filters, taxonomy), list(transactions))


__all__ = [
    "filter_transaction_fields",
    "filter_by_category",
    "filter_line_items",
    "filter_by_keyword",
    "build_stages",
    "apply_filters",
]
