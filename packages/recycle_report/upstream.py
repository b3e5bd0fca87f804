"""Thin client for the two upstream JSON sources.

Plain ``GET`` requests via :mod:`urllib.request`; each response body must be a
JSON object. Any failure (network, HTTP status, timeout, non-JSON body,
unexpected shape) is raised as :class:`UpstreamFetchError` so callers can
treat the whole request as failed without partial results.

No retries or caching: upstream data is fetched fresh for every request.
"""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.request
from typing import Any

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import TaxonomySource, TransactionSource
from .settings import ReportSettings

_logger = get_logger("recycle_report.upstream")


class UpstreamFetchError(RuntimeError):
    """An upstream source could not be fetched or did not have the expected shape."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


def get_json(url: str, *, timeout: float, source: str) -> dict[str, Any]:
    """Fetch ``url`` and return its JSON object body."""

    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")

    t0 = time.perf_counter()
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise UpstreamFetchError(source, f"HTTP {e.code} {e.reason}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise UpstreamFetchError(source, f"request failed: {e}") from e

    try:
        decoded = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UpstreamFetchError(source, "response body is not valid JSON") from e
    if not isinstance(decoded, dict):
        raise UpstreamFetchError(
            source, f"expected a JSON object, got {type(decoded).__name__}"
        )

    _logger.info(
        "upstream:fetch_done source=%s bytes=%d latency_ms=%.2f",
        source,
        len(body),
        (time.perf_counter() - t0) * 1000.0,
    )
    return decoded


def fetch_transaction_source(settings: ReportSettings) -> TransactionSource:
    raw = get_json(settings.transactions_url, timeout=settings.timeout_seconds, source="transactions")
    try:
        return TransactionSource.model_validate(raw)
    except ValidationError as e:
        raise UpstreamFetchError("transactions", f"unexpected payload shape: {e}") from e


def fetch_taxonomy_source(settings: ReportSettings) -> TaxonomySource:
    raw = get_json(settings.products_url, timeout=settings.timeout_seconds, source="products")
    try:
        return TaxonomySource.model_validate(raw)
    except ValidationError as e:
        raise UpstreamFetchError("products", f"unexpected payload shape: {e}") from e


__all__ = [
    "UpstreamFetchError",
    "get_json",
    "fetch_transaction_source",
    "fetch_taxonomy_source",
]
