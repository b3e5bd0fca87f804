"""CLI for the ``recycle_report`` package.

Command handlers (``cmd_search``, ``cmd_categories``, ``cmd_subcategories``)
return process exit codes and are wrapped by a Typer console interface. The
root callback loads a local ``.env`` with ``python-dotenv`` and configures
logging before any command runs. Business logic lives in
:mod:`recycle_report.api`.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from decimal import Decimal
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.table import Table

from .logging_setup import configure_logging
from .models import SearchFilters, SearchResult


def _console() -> Console:
    # Built per call so the width follows the current terminal (or COLUMNS).
    return Console()


# ---- Rendering ---------------------------------------------------------------


def _fmt(value: Decimal | int) -> str:
    if isinstance(value, int):
        return str(value)
    return f"{value:,.2f}"


def render_search_table(result: SearchResult) -> Table:
    """Build a rich table with one row per pair and a closing total row."""

    table = Table(title="Buy/sell summary", show_footer=False)
    table.add_column("Category")
    table.add_column("Subcategory")
    for header in (
        "Buy wt",
        "Buy total",
        "Buy #",
        "Sell wt",
        "Sell total",
        "Sell #",
        "Remain wt",
        "Remain amt",
        "Remain #",
    ):
        table.add_column(header, justify="right")

    for r in result.data:
        table.add_row(
            f"{r.category_id} {r.category_name}",
            f"{r.sub_category_id} {r.sub_category_name}",
            _fmt(r.buy_weight),
            _fmt(r.buy_total),
            _fmt(r.buy_count),
            _fmt(r.sell_weight),
            _fmt(r.sell_total),
            _fmt(r.sell_count),
            _fmt(r.remain_weight),
            _fmt(r.remain_amount),
            _fmt(r.remain_count),
        )

    s = result.summary
    table.add_section()
    table.add_row(
        "Total",
        "",
        _fmt(s.total_buy_weight),
        _fmt(s.total_buy_total),
        _fmt(s.total_buy_count),
        _fmt(s.total_sell_weight),
        _fmt(s.total_sell_total),
        _fmt(s.total_sell_count),
        _fmt(s.total_remain_weight),
        _fmt(s.total_remain_amount),
        _fmt(s.total_remain_count),
        style="bold",
    )
    return table


def _echo_json(payload: BaseModel | dict) -> None:
    if isinstance(payload, BaseModel):
        typer.echo(payload.model_dump_json(by_alias=True, indent=2))
        return
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _options_table(title: str, rows: Sequence[tuple[str, str]]) -> Table:
    table = Table(title=title)
    table.add_column("Id")
    table.add_column("Name")
    for row in rows:
        table.add_row(*row)
    return table


# ---- Command handlers --------------------------------------------------------


def cmd_search(filters: dict, *, as_json: bool = False) -> int:
    """Run a search and print the report (rich table, or JSON with ``as_json``).

    Invalid filter values and upstream failures are reported on stderr with a
    non-zero exit status.
    """

    from .api import search

    try:
        search_filters = SearchFilters.model_validate(filters)
    except ValidationError as e:
        print(f"Error: invalid filters: {e}", file=sys.stderr)
        return 1

    try:
        result = search(search_filters)
    except Exception as e:
        print(f"Error: failed to fetch or process data: {e}", file=sys.stderr)
        return 1

    if as_json:
        _echo_json(result)
    else:
        _console().print(render_search_table(result))
    return 0


def cmd_categories(*, as_json: bool = False) -> int:
    from .api import list_categories

    try:
        options = list_categories()
    except Exception as e:
        print(f"Error: failed to fetch categories: {e}", file=sys.stderr)
        return 1

    if as_json:
        _echo_json({"data": [o.model_dump(mode="json", by_alias=True) for o in options]})
    else:
        rows = [(o.category_id, o.category_name) for o in options]
        _console().print(_options_table("Categories", rows))
    return 0


def cmd_subcategories(category_id: str, *, as_json: bool = False) -> int:
    from .api import list_subcategories

    try:
        options = list_subcategories(category_id)
    except Exception as e:
        print(f"Error: failed to fetch subcategories: {e}", file=sys.stderr)
        return 1

    if as_json:
        _echo_json({"data": [o.model_dump(mode="json", by_alias=True) for o in options]})
    else:
        rows = [(o.sub_category_id, o.sub_category_name) for o in options]
        _console().print(_options_table(f"Subcategories of {category_id}", rows))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Buy/sell summaries over the recycling trade ledger. "
        "Upstream endpoints are read from RECYCLE_REPORT_* variables (a local .env is loaded)."
    ),
)

JSON_OPTION = typer.Option(False, "--json", help="Print JSON instead of a table.")


@app.command("search")
def search_cmd(
    *,
    start_date: str | None = typer.Option(None, help="Earliest orderFinishedDate (ISO-8601)."),
    end_date: str | None = typer.Option(None, help="Latest orderFinishedDate (ISO-8601)."),
    order_id: str | None = typer.Option(None, help="Exact order id."),
    category_id: str | None = typer.Option(None, help="Category id, e.g. 3 or 03."),
    sub_category_id: str | None = typer.Option(None, help="Subcategory id, e.g. 7 or 0007."),
    min_price: str | None = typer.Option(None, help="Minimum line-item total."),
    max_price: str | None = typer.Option(None, help="Maximum line-item total."),
    grade: str | None = typer.Option(None, help="Exact line-item grade."),
    keyword: str | None = typer.Option(
        None, help="Case-insensitive match on order id or subcategory name."
    ),
    as_json: bool = JSON_OPTION,
) -> None:
    """Filter transactions and print per category/subcategory buy/sell figures."""

    filters = {
        "start_date": start_date,
        "end_date": end_date,
        "order_id": order_id,
        "category_id": category_id,
        "sub_category_id": sub_category_id,
        "min_price": min_price,
        "max_price": max_price,
        "grade": grade,
        "keyword": keyword,
    }
    raise typer.Exit(cmd_search(filters, as_json=as_json))


@app.command("categories")
def categories_cmd(*, as_json: bool = JSON_OPTION) -> None:
    """List product categories."""

    raise typer.Exit(cmd_categories(as_json=as_json))


@app.command("subcategories")
def subcategories_cmd(category_id: str, *, as_json: bool = JSON_OPTION) -> None:
    """List the subcategories of CATEGORY_ID."""

    raise typer.Exit(cmd_subcategories(category_id, as_json=as_json))


@app.command("serve")
def serve_cmd(
    *,
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Bind port."),
) -> None:
    """Serve the HTTP routes with uvicorn."""

    import uvicorn

    from .web import create_app

    uvicorn.run(create_app(), host=host, port=port)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - `python -m recycle_report.cli`
    main()
