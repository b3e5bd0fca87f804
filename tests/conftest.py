"""Shared pytest fixtures.

Puts ``packages/`` (and the repo root, for ``tests.helpers``) on ``sys.path``
so the suite runs from a plain checkout, and provides parsed payloads plus a
``stub_upstream`` fixture that replaces both HTTP fetches. Tests never touch
the network.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from recycle_report import upstream  # noqa: E402
from recycle_report.models import TaxonomySource, TransactionSource  # noqa: E402
from recycle_report.taxonomy import TaxonomyIndex  # noqa: E402

from tests.helpers.payloads import LEDGER_PAYLOAD, TAXONOMY_PAYLOAD  # noqa: E402


@pytest.fixture
def transaction_source() -> TransactionSource:
    return TransactionSource.model_validate(LEDGER_PAYLOAD)


@pytest.fixture
def taxonomy_source() -> TaxonomySource:
    return TaxonomySource.model_validate(TAXONOMY_PAYLOAD)


@pytest.fixture
def taxonomy(taxonomy_source: TaxonomySource) -> TaxonomyIndex:
    return TaxonomyIndex.from_source(taxonomy_source)


class UpstreamStub:
    """Stand-in for both fetchers; records calls and can be told to fail."""

    def __init__(self, transactions: TransactionSource, products: TaxonomySource) -> None:
        self.transactions = transactions
        self.products = products
        self.calls: list[str] = []
        self.fail: set[str] = set()

    def fetch_transactions(self, settings: Any) -> TransactionSource:
        self.calls.append("transactions")
        if "transactions" in self.fail:
            raise upstream.UpstreamFetchError("transactions", "HTTP 502 Bad Gateway")
        return self.transactions

    def fetch_products(self, settings: Any) -> TaxonomySource:
        self.calls.append("products")
        if "products" in self.fail:
            raise upstream.UpstreamFetchError("products", "request failed: timed out")
        return self.products


@pytest.fixture
def stub_upstream(
    monkeypatch: pytest.MonkeyPatch,
    transaction_source: TransactionSource,
    taxonomy_source: TaxonomySource,
) -> UpstreamStub:
    stub = UpstreamStub(transaction_source, taxonomy_source)
    monkeypatch.setattr(upstream, "fetch_transaction_source", stub.fetch_transactions)
    monkeypatch.setattr(upstream, "fetch_taxonomy_source", stub.fetch_products)
    return stub
