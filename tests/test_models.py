from decimal import Decimal

import pytest
from pydantic import ValidationError

from recycle_report.models import (
    SearchFilters,
    Side,
    SummaryRecord,
    TaxonomySource,
    Transaction,
    TransactionSource,
)

from tests.helpers.payloads import group, line, transactions_payload, tx


def test_sides_are_tagged_at_ingestion_and_buy_comes_first(transaction_source):
    txs = transaction_source.transactions()
    assert [t.order_id for t in txs] == ["B1", "B2", "S1", "ORD-100"]
    assert [t.side for t in txs] == [Side.BUY, Side.BUY, Side.SELL, Side.SELL]
    assert txs[0].is_buy and not txs[2].is_buy


def test_side_tag_follows_the_list_not_the_order_id():
    payload = transactions_payload(
        buy=[tx("X1", "2024-01-01", group("01", "0001", line("A", 1, 1)))],
        sell=[tx("X1", "2024-01-02", group("01", "0001", line("A", 2, 2)))],
    )
    buy, sell = TransactionSource.model_validate(payload).transactions()
    assert buy.side is Side.BUY
    assert sell.side is Side.SELL


def test_missing_lists_default_to_empty():
    src = TransactionSource.model_validate({"buyTransaction": None})
    assert src.transactions() == []

    t = Transaction.model_validate({"orderId": "A"})
    assert t.request_list == ()
    assert t.order_finished_date is None


def test_malformed_records_are_defaulted_not_rejected():
    payload = transactions_payload(
        buy=[
            {
                "orderId": 123,
                "orderFinishedDate": "yesterday-ish",
                "requestList": [
                    "garbage",
                    {"categoryID": 1, "subCategoryID": 7, "requestList": None},
                    {
                        "categoryID": "01",
                        "subCategoryID": "0001",
                        "requestList": [{"grade": None, "quantity": "abc"}, 5],
                    },
                ],
            },
            "not-a-transaction",
        ],
        sell=[],
    )
    [t] = TransactionSource.model_validate(payload).transactions()
    assert t.order_id == "123"
    assert t.order_finished_date is None
    assert len(t.request_list) == 2

    empty_group, full_group = t.request_list
    assert (empty_group.category_id, empty_group.sub_category_id) == ("01", "0007")
    assert empty_group.request_list == ()

    [item] = full_group.request_list
    assert item.grade == ""
    assert item.quantity == Decimal("0")
    assert item.total == Decimal("0")


def test_group_key_uses_normalized_ids():
    t = Transaction.model_validate(tx("A", None, group(3, 12)))
    assert t.request_list[0].key == "03-0012"


def test_models_are_frozen(transaction_source):
    t = transaction_source.transactions()[0]
    with pytest.raises(ValidationError):
        t.order_id = "changed"


def test_taxonomy_accepts_object_shaped_product_list():
    src = TaxonomySource.model_validate(
        {"productList": {"a": {"categoryId": 5, "categoryName": "Glass"}}}
    )
    [cat] = src.product_list
    assert cat.category_id == "05"
    assert cat.subcategory == ()


def test_search_filters_blank_strings_are_absent():
    f = SearchFilters.model_validate(
        {"startDate": "", "grade": " ", "keyword": "   ", "minPrice": "", "categoryId": ""}
    )
    assert f.start_date is None
    assert f.grade is None
    assert f.keyword is None
    assert f.min_price is None
    assert f.category_id is None
    assert not f.has_line_item_filters


def test_search_filters_normalize_ids_and_accept_both_name_styles():
    f = SearchFilters.model_validate({"categoryId": 3, "sub_category_id": "7", "maxPrice": "100"})
    assert f.category_id == "03"
    assert f.sub_category_id == "0007"
    assert f.max_price == Decimal("100")
    assert f.has_line_item_filters


def test_search_filters_reject_non_numeric_prices():
    with pytest.raises(ValidationError):
        SearchFilters(min_price="cheap")


def test_search_filters_reject_unknown_fields():
    with pytest.raises(ValidationError):
        SearchFilters.model_validate({"pageSize": 10})


def test_report_json_uses_camel_case_numbers():
    rec = SummaryRecord(
        category_id="01",
        sub_category_id="0001",
        category_name="Metal",
        sub_category_name="Aluminium Can",
        buy_weight=Decimal("10.5"),
        buy_count=1,
    )
    dumped = rec.model_dump(mode="json", by_alias=True)
    assert dumped["subCategoryName"] == "Aluminium Can"
    assert dumped["buyWeight"] == 10.5
    assert dumped["remainCount"] == 0
