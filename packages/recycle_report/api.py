"""Public API for the ``recycle_report`` package.

- :func:`run_search`: the pure core. Payloads and filters in, report out.
- :func:`search`: fetches both upstream sources concurrently, then delegates
  to :func:`run_search`.
- :func:`list_categories` / :func:`list_subcategories`: projections of the
  taxonomy used to populate filter pickers.

Upstream failures propagate as
:class:`~recycle_report.upstream.UpstreamFetchError`; nothing is aggregated
when either fetch fails.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from . import upstream
from .aggregate import aggregate, totalize
from .filters import apply_filters
from .logging_setup import get_logger
from .models import (
    CategoryOption,
    SearchFilters,
    SearchResult,
    SubcategoryOption,
    TaxonomySource,
    TransactionSource,
)
from .settings import ReportSettings, load_settings
from .taxonomy import TaxonomyIndex

_logger = get_logger("recycle_report.api")


def run_search(
    transaction_source: TransactionSource,
    taxonomy_source: TaxonomySource,
    filters: SearchFilters | None = None,
) -> SearchResult:
    """Filter the side-tagged transaction union and aggregate the survivors.

    Buy-side records come first (in input order), then sell-side. Empty input
    yields empty ``data`` and an all-zero ``summary``.
    """

    taxonomy = TaxonomyIndex.from_source(taxonomy_source)
    transactions = transaction_source.transactions()
    filtered = apply_filters(transactions, filters, taxonomy)
    records = aggregate(filtered, taxonomy)
    _logger.info(
        "search:done transactions_in=%d transactions_out=%d records=%d",
        len(transactions),
        len(filtered),
        len(records),
    )
    return SearchResult(summary=totalize(records), data=records)


def _fetch_both(settings: ReportSettings) -> tuple[TransactionSource, TaxonomySource]:
    # Neither fetch depends on the other; .result() re-raises the first failure.
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="recycle-fetch") as pool:
        tx_future = pool.submit(upstream.fetch_transaction_source, settings)
        tax_future = pool.submit(upstream.fetch_taxonomy_source, settings)
        return tx_future.result(), tax_future.result()


def search(
    filters: SearchFilters | dict[str, Any] | None = None,
    *,
    settings: ReportSettings | None = None,
) -> SearchResult:
    """Fetch transactions and taxonomy, then run :func:`run_search`.

    ``filters`` may be a :class:`SearchFilters` or a mapping of its fields
    (camelCase or snake_case names).
    """

    if isinstance(filters, dict):
        filters = SearchFilters.model_validate(filters)
    settings = settings or load_settings()

    t0 = time.perf_counter()
    transaction_source, taxonomy_source = _fetch_both(settings)
    _logger.debug("search:fetched latency_ms=%.2f", (time.perf_counter() - t0) * 1000.0)
    return run_search(transaction_source, taxonomy_source, filters)


def _load_taxonomy(settings: ReportSettings | None) -> TaxonomyIndex:
    return TaxonomyIndex.from_source(upstream.fetch_taxonomy_source(settings or load_settings()))


def list_categories(*, settings: ReportSettings | None = None) -> list[CategoryOption]:
    return _load_taxonomy(settings).categories()


def list_subcategories(
    category_id: Any, *, settings: ReportSettings | None = None
) -> list[SubcategoryOption]:
    """Subcategories of ``category_id``; an unknown category yields ``[]``."""

    return _load_taxonomy(settings).subcategories(category_id)


__all__ = ["run_search", "search", "list_categories", "list_subcategories"]
