"""Fold filtered transactions into per-pair summaries and a grand total.

Figures are query-dependent: callers pass the output of
:func:`recycle_report.filters.apply_filters`, never the raw payload. All sums
use ``Decimal`` so fractional amounts do not drift across many additions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from .models import Group, Side, SummaryRecord, TotalRecord, Transaction
from .taxonomy import TaxonomyIndex

_ZERO = Decimal("0")


@dataclass(slots=True)
class _SideTotals:
    weight: Decimal = _ZERO
    total: Decimal = _ZERO
    count: int = 0

    def add(self, quantity: Decimal, total: Decimal) -> None:
        self.weight += quantity
        self.total += total
        if total > 0:
            self.count += 1


@dataclass(slots=True)
class _Accumulator:
    category_id: str
    sub_category_id: str
    buy: _SideTotals
    sell: _SideTotals

    @classmethod
    def for_group(cls, group: Group) -> _Accumulator:
        return cls(group.category_id, group.sub_category_id, _SideTotals(), _SideTotals())

    def to_record(self, taxonomy: TaxonomyIndex) -> SummaryRecord:
        return SummaryRecord(
            category_id=self.category_id,
            sub_category_id=self.sub_category_id,
            category_name=taxonomy.category_name(self.category_id),
            sub_category_name=taxonomy.subcategory_name(self.category_id, self.sub_category_id),
            buy_weight=self.buy.weight,
            buy_total=self.buy.total,
            sell_weight=self.sell.weight,
            sell_total=self.sell.total,
            remain_weight=self.sell.weight - self.buy.weight,
            remain_amount=self.sell.total - self.buy.total,
            remain_count=self.sell.count - self.buy.count,
            buy_count=self.buy.count,
            sell_count=self.sell.count,
        )


def aggregate(
    transactions: Iterable[Transaction], taxonomy: TaxonomyIndex
) -> list[SummaryRecord]:
    """Summarize line items by ``categoryId-subCategoryId`` and side.

    Records appear in the order their key is first seen. A group with no line
    items still produces a zeroed record for its key. Counts only move for
    line items whose ``total`` is strictly positive.
    """

    by_key: dict[str, _Accumulator] = {}
    for t in transactions:
        for group in t.request_list:
            acc = by_key.get(group.key)
            if acc is None:
                acc = by_key[group.key] = _Accumulator.for_group(group)
            side = acc.buy if t.side is Side.BUY else acc.sell
            for item in group.request_list:
                side.add(item.quantity, item.total)
    return [acc.to_record(taxonomy) for acc in by_key.values()]


def totalize(records: Sequence[SummaryRecord]) -> TotalRecord:
    """Sum every numeric field of ``records`` into a single :class:`TotalRecord`."""

    return TotalRecord(
        total_buy_weight=sum((r.buy_weight for r in records), _ZERO),
        total_buy_total=sum((r.buy_total for r in records), _ZERO),
        total_sell_weight=sum((r.sell_weight for r in records), _ZERO),
        total_sell_total=sum((r.sell_total for r in records), _ZERO),
        total_remain_weight=sum((r.remain_weight for r in records), _ZERO),
        total_remain_amount=sum((r.remain_amount for r in records), _ZERO),
        total_buy_count=sum(r.buy_count for r in records),
        total_sell_count=sum(r.sell_count for r in records),
        total_remain_count=sum(r.remain_count for r in records),
    )


__all__ = ["aggregate", "totalize"]
