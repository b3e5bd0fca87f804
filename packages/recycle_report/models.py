"""Data models for ``recycle_report``.

Upstream payload models (``Transaction``, ``Group``, ``LineItem``,
``Category``, ``Subcategory`` and the two source envelopes) accept the camelCase
wire names and apply the default-value policy from
:mod:`recycle_report.normalizers` in ``before`` validators, so downstream code
can rely on every field being present and well-typed.

All models are frozen and carry tuples rather than lists; filter stages build
new values with ``model_copy(update=...)`` and never mutate their input.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .normalizers import (
    as_decimal,
    as_records,
    as_text,
    blank_to_none,
    category_id_or_blank,
    normalize_category_id,
    normalize_subcategory_id,
    parse_timestamp,
    subcategory_id_or_blank,
)

# Decimals stay exact in Python and render as JSON numbers.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Side(StrEnum):
    """Which upstream sequence a transaction came from."""

    BUY = "buy"
    SELL = "sell"


_WIRE = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# Taxonomy payload
# ---------------------------------------------------------------------------


class Subcategory(BaseModel):
    model_config = _WIRE

    sub_category_id: str = Field("", alias="subCategoryId")
    sub_category_name: str = Field("", alias="subCategoryName")

    @field_validator("sub_category_id", mode="before")
    @classmethod
    def _normalize_id(cls, v: Any) -> str:
        return subcategory_id_or_blank(v)

    @field_validator("sub_category_name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)


class Category(BaseModel):
    model_config = _WIRE

    category_id: str = Field("", alias="categoryId")
    category_name: str = Field("", alias="categoryName")
    subcategory: tuple[Subcategory, ...] = ()

    @field_validator("category_id", mode="before")
    @classmethod
    def _normalize_id(cls, v: Any) -> str:
        return category_id_or_blank(v)

    @field_validator("category_name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)

    @field_validator("subcategory", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list[Any]:
        return as_records(v)


class TaxonomySource(BaseModel):
    """Envelope of the product-catalog endpoint: ``{"productList": [...]}``."""

    model_config = _WIRE

    product_list: tuple[Category, ...] = Field((), alias="productList")

    @field_validator("product_list", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list[Any]:
        return as_records(v)


# ---------------------------------------------------------------------------
# Transaction payload
# ---------------------------------------------------------------------------


class LineItem(BaseModel):
    model_config = _WIRE

    grade: str = ""
    quantity: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    @field_validator("grade", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)

    @field_validator("quantity", "total", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Decimal:
        return as_decimal(v)


class Group(BaseModel):
    """Category/subcategory grouping of line items within one transaction."""

    model_config = _WIRE

    category_id: str = Field("", alias="categoryID")
    sub_category_id: str = Field("", alias="subCategoryID")
    request_list: tuple[LineItem, ...] = Field((), alias="requestList")

    @field_validator("category_id", mode="before")
    @classmethod
    def _category(cls, v: Any) -> str:
        return category_id_or_blank(v)

    @field_validator("sub_category_id", mode="before")
    @classmethod
    def _subcategory(cls, v: Any) -> str:
        return subcategory_id_or_blank(v)

    @field_validator("request_list", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list[Any]:
        return as_records(v)

    @property
    def key(self) -> str:
        return f"{self.category_id}-{self.sub_category_id}"


class Transaction(BaseModel):
    """One buy or sell order.

    ``side`` is not part of the upstream record; :class:`TransactionSource`
    stamps it at ingestion from the list the record arrived in. Records built
    directly without a side are treated as sells.
    """

    model_config = _WIRE

    order_id: str = Field("", alias="orderId")
    order_finished_date: datetime | None = Field(None, alias="orderFinishedDate")
    request_list: tuple[Group, ...] = Field((), alias="requestList")
    side: Side = Side.SELL

    @field_validator("order_id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)

    @field_validator("order_finished_date", mode="before")
    @classmethod
    def _timestamp(cls, v: Any) -> datetime | None:
        return parse_timestamp(v)

    @field_validator("request_list", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list[Any]:
        return as_records(v)

    @property
    def is_buy(self) -> bool:
        return self.side is Side.BUY


def _tag(records: Any, side: Side) -> list[Any]:
    tagged: list[Any] = []
    for rec in as_records(records):
        if isinstance(rec, Transaction):
            tagged.append(rec.model_copy(update={"side": side}))
        elif isinstance(rec, BaseModel):
            continue
        else:
            tagged.append({**rec, "side": side})
    return tagged


class TransactionSource(BaseModel):
    """Envelope of the transaction endpoint: buy and sell lists."""

    model_config = _WIRE

    buy_transaction: tuple[Transaction, ...] = Field((), alias="buyTransaction")
    sell_transaction: tuple[Transaction, ...] = Field((), alias="sellTransaction")

    @model_validator(mode="before")
    @classmethod
    def _tag_sides(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        for wire, name, side in (
            ("buyTransaction", "buy_transaction", Side.BUY),
            ("sellTransaction", "sell_transaction", Side.SELL),
        ):
            key = wire if wire in out else name
            out[key] = _tag(out.get(key), side)
        return out

    def transactions(self) -> list[Transaction]:
        """Buy-side records in input order, followed by sell-side records."""

        return [*self.buy_transaction, *self.sell_transaction]


# ---------------------------------------------------------------------------
# Query filters
# ---------------------------------------------------------------------------


class SearchFilters(BaseModel):
    """Optional filters for a search; every field absent means "no filter".

    Blank strings are treated as absent. ``category_id``/``sub_category_id``
    are normalized to their zero-padded forms on construction. Date bounds are
    kept as given and parsed by the filter stage so an unparsable bound can
    fail closed rather than be silently dropped.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )

    start_date: datetime | str | None = None
    end_date: datetime | str | None = None
    order_id: str | None = None
    category_id: str | None = None
    sub_category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    grade: str | None = None
    keyword: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_absent(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("category_id", mode="before")
    @classmethod
    def _category(cls, v: Any) -> str | None:
        v = blank_to_none(v)
        return None if v is None else normalize_category_id(v)

    @field_validator("sub_category_id", mode="before")
    @classmethod
    def _subcategory(cls, v: Any) -> str | None:
        v = blank_to_none(v)
        return None if v is None else normalize_subcategory_id(v)

    @property
    def has_line_item_filters(self) -> bool:
        return any(
            v is not None
            for v in (self.sub_category_id, self.grade, self.min_price, self.max_price)
        )


# ---------------------------------------------------------------------------
# Report output
# ---------------------------------------------------------------------------

_REPORT = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class SummaryRecord(BaseModel):
    """Buy/sell figures for one ``categoryId-subCategoryId`` pair."""

    model_config = _REPORT

    category_id: str
    sub_category_id: str
    category_name: str
    sub_category_name: str
    buy_weight: Amount = Decimal("0")
    buy_total: Amount = Decimal("0")
    sell_weight: Amount = Decimal("0")
    sell_total: Amount = Decimal("0")
    remain_weight: Amount = Decimal("0")
    remain_amount: Amount = Decimal("0")
    remain_count: int = 0
    buy_count: int = 0
    sell_count: int = 0

    @property
    def key(self) -> str:
        return f"{self.category_id}-{self.sub_category_id}"


class TotalRecord(BaseModel):
    model_config = _REPORT

    total_buy_weight: Amount = Decimal("0")
    total_buy_total: Amount = Decimal("0")
    total_sell_weight: Amount = Decimal("0")
    total_sell_total: Amount = Decimal("0")
    total_remain_weight: Amount = Decimal("0")
    total_remain_amount: Amount = Decimal("0")
    total_buy_count: int = 0
    total_sell_count: int = 0
    total_remain_count: int = 0


class SearchResult(BaseModel):
    model_config = _REPORT

    summary: TotalRecord
    data: list[SummaryRecord]


class CategoryOption(BaseModel):
    model_config = _REPORT

    category_id: str
    category_name: str


class SubcategoryOption(BaseModel):
    model_config = _REPORT

    sub_category_id: str
    sub_category_name: str
