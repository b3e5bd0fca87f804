from decimal import Decimal

import pytest

from recycle_report.filters import (
    apply_filters,
    build_stages,
    filter_by_category,
    filter_by_keyword,
    filter_line_items,
    filter_transaction_fields,
)
from recycle_report.models import SearchFilters, TransactionSource

from tests.helpers.payloads import group, line, transactions_payload, tx


def _ids(transactions):
    return [t.order_id for t in transactions]


def _keys(transaction):
    return [g.key for g in transaction.request_list]


# ---- Stage 1 -----------------------------------------------------------------


def test_date_bounds_are_inclusive(transaction_source):
    txs = transaction_source.transactions()
    out = filter_transaction_fields(
        txs, start_date="2024-01-20T09:00:00Z", end_date="2024-02-15T09:00:00Z"
    )
    assert _ids(out) == ["B2", "S1"]


def test_date_only_bounds_compare_as_utc_midnight(transaction_source):
    txs = transaction_source.transactions()
    assert _ids(filter_transaction_fields(txs, start_date="2024-02-01")) == ["B2", "ORD-100"]
    assert _ids(filter_transaction_fields(txs, end_date="2024-01-31")) == ["B1", "S1"]


def test_unparsable_filter_date_fails_closed(transaction_source):
    txs = transaction_source.transactions()
    assert filter_transaction_fields(txs, start_date="not-a-date") == []
    assert filter_transaction_fields(txs, end_date="2024-99-99") == []


def test_unparsable_record_date_is_excluded_only_when_dates_are_filtered():
    src = TransactionSource.model_validate(
        transactions_payload(
            buy=[tx("BAD", "garbage", group("01", "0001", line("A", 1, 1)))],
            sell=[tx("OK", "2024-06-01", group("01", "0001", line("A", 1, 1)))],
        )
    )
    txs = src.transactions()
    assert _ids(filter_transaction_fields(txs, start_date="2024-01-01")) == ["OK"]
    assert _ids(filter_transaction_fields(txs, order_id="BAD")) == ["BAD"]


def test_order_id_is_an_exact_match(transaction_source):
    txs = transaction_source.transactions()
    assert _ids(filter_transaction_fields(txs, order_id="ORD-100")) == ["ORD-100"]
    assert filter_transaction_fields(txs, order_id="ord-100") == []
    assert filter_transaction_fields(txs, order_id="ORD") == []


# ---- Stage 2 -----------------------------------------------------------------


def test_category_filter_rewrites_groups_and_drops_empty(transaction_source):
    out = filter_by_category(transaction_source.transactions(), "02")
    assert _ids(out) == ["B2", "ORD-100"]
    assert _keys(out[0]) == ["02-0001"]
    assert _keys(out[1]) == ["02-0003"]


# ---- Stage 3 -----------------------------------------------------------------


def test_subcategory_filter_is_per_group(transaction_source):
    out = filter_line_items(transaction_source.transactions(), sub_category_id="0001")
    assert _ids(out) == ["B1", "B2", "S1"]
    assert _keys(out[1]) == ["02-0001"]


def test_grade_filter_keeps_matching_line_items(transaction_source):
    out = filter_line_items(transaction_source.transactions(), grade="B")
    assert _ids(out) == ["B2", "ORD-100"]
    [b2_group] = out[0].request_list
    assert b2_group.key == "01-0002"
    assert [i.grade for i in b2_group.request_list] == ["B"]


@pytest.mark.parametrize(
    ("min_price", "max_price", "kept"),
    [
        (None, Decimal("100"), False),
        (None, Decimal("200"), True),
        (None, None, True),
        (Decimal("150"), None, True),
        (Decimal("151"), None, False),
        (Decimal("150"), Decimal("150"), True),
    ],
)
def test_price_range_on_line_item_total(min_price, max_price, kept):
    src = TransactionSource.model_validate(
        transactions_payload(buy=[], sell=[tx("P", "2024-01-01", group("01", "0001", line("A", 1, 150)))])
    )
    out = filter_line_items(src.transactions(), min_price=min_price, max_price=max_price)
    assert (len(out) == 1) is kept


# ---- Stage 4 -----------------------------------------------------------------


def test_keyword_on_order_id_keeps_original_groups(transaction_source, taxonomy):
    out = filter_by_keyword(transaction_source.transactions(), "100", taxonomy)
    assert _ids(out) == ["ORD-100"]
    assert _keys(out[0]) == ["02-0003", "01-0002"]


def test_keyword_on_subcategory_name_keeps_only_matching_groups(transaction_source, taxonomy):
    out = filter_by_keyword(transaction_source.transactions(), "alu", taxonomy)
    assert _ids(out) == ["B1", "S1"]
    assert all(_keys(t) == ["01-0001"] for t in out)


def test_keyword_name_match_wins_over_order_id_match(taxonomy):
    src = TransactionSource.model_validate(
        transactions_payload(
            buy=[
                tx(
                    "WIRE-7",
                    "2024-01-01",
                    group("01", "0002", line("A", 1, 1)),
                    group("02", "0001", line("A", 1, 1)),
                )
            ],
            sell=[],
        )
    )
    [t] = filter_by_keyword(src.transactions(), "WIRE", taxonomy)
    assert _keys(t) == ["01-0002"]


def test_keyword_is_case_insensitive_and_unresolved_groups_never_match(taxonomy):
    src = TransactionSource.model_validate(
        transactions_payload(
            buy=[tx("X", "2024-01-01", group("09", "0001", line("A", 1, 1)))],
            sell=[tx("Y", "2024-01-01", group("02", "0003", line("A", 1, 1)))],
        )
    )
    assert _ids(filter_by_keyword(src.transactions(), "NEWS", taxonomy)) == ["Y"]
    assert filter_by_keyword(src.transactions(), "subcategory", taxonomy) == []


def test_order_id_keyword_hit_survives_earlier_filters(transaction_source, taxonomy):
    filters = SearchFilters(category_id="1", keyword="ord")
    [t] = apply_filters(transaction_source.transactions(), filters, taxonomy)
    assert t.order_id == "ORD-100"
    # Keeps the category-filtered list, i.e. the input to the keyword stage.
    assert _keys(t) == ["01-0002"]


# ---- Composition -------------------------------------------------------------


def test_no_filters_is_identity(transaction_source, taxonomy):
    txs = transaction_source.transactions()
    assert apply_filters(txs, None, taxonomy) == txs
    assert apply_filters(txs, SearchFilters(), taxonomy) == txs
    assert build_stages(SearchFilters(), taxonomy) == []


def test_stage_order(taxonomy):
    filters = SearchFilters(
        keyword="x", grade="A", category_id="01", order_id="B1", start_date="2024-01-01"
    )
    assert [name for name, _ in build_stages(filters, taxonomy)] == [
        "transaction_fields",
        "category",
        "line_items",
        "keyword",
    ]


def test_stages_compose(transaction_source, taxonomy):
    filters = SearchFilters(start_date="2024-02-01", category_id=1, grade="A")
    out = apply_filters(transaction_source.transactions(), filters, taxonomy)
    assert _ids(out) == ["B2", "ORD-100"]
    assert _keys(out[0]) == ["01-0002"]
    assert [i.grade for i in out[0].request_list[0].request_list] == ["A"]


def test_filtering_never_mutates_input(transaction_source, taxonomy):
    txs = transaction_source.transactions()
    before = [t.model_dump() for t in txs]
    apply_filters(
        txs,
        SearchFilters(category_id="01", sub_category_id="0002", grade="A", keyword="copper"),
        taxonomy,
    )
    assert [t.model_dump() for t in txs] == before
    assert [t.model_dump() for t in transaction_source.transactions()] == before
