"""Runtime configuration read from the environment.

Entrypoints load a local ``.env`` (``python-dotenv``) before calling
:func:`load_settings`; library code receives a :class:`ReportSettings`
instance and never reads the environment itself.

Variables
---------
- ``RECYCLE_REPORT_TRANSACTIONS_URL``: buy/sell transaction endpoint.
- ``RECYCLE_REPORT_PRODUCTS_URL``: product catalog (taxonomy) endpoint.
- ``RECYCLE_REPORT_HTTP_TIMEOUT``: per-request timeout in seconds (default 10).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TRANSACTIONS_URL = "https://apirecycle.unii.co.th/Stock/query-transaction-demo"
DEFAULT_PRODUCTS_URL = "https://apirecycle.unii.co.th/category/query-product-demo"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ReportSettings:
    transactions_url: str = DEFAULT_TRANSACTIONS_URL
    products_url: str = DEFAULT_PRODUCTS_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _resolve_timeout(raw: str | None) -> float:
    try:
        value = float(raw) if raw else None
    except ValueError:
        value = None
    if value is None or value <= 0:
        return DEFAULT_TIMEOUT_SECONDS
    return value


def load_settings() -> ReportSettings:
    """Build settings from ``RECYCLE_REPORT_*`` variables, with defaults."""

    return ReportSettings(
        transactions_url=(
            os.getenv("RECYCLE_REPORT_TRANSACTIONS_URL") or DEFAULT_TRANSACTIONS_URL
        ).strip(),
        products_url=(os.getenv("RECYCLE_REPORT_PRODUCTS_URL") or DEFAULT_PRODUCTS_URL).strip(),
        timeout_seconds=_resolve_timeout(os.getenv("RECYCLE_REPORT_HTTP_TIMEOUT")),
    )


__all__ = ["ReportSettings", "load_settings"]
