"""HTTP surface: ``/search``, ``/categories`` and ``/subcategories/{category_id}``.

Routes are thin: they translate query parameters into
:class:`~recycle_report.models.SearchFilters`, call :mod:`recycle_report.api`
and map failures to status codes (422 for invalid parameters, 500 for any
upstream or processing failure, with a generic message).
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from . import api
from .logging_setup import configure_logging, get_logger
from .models import SearchFilters
from .settings import ReportSettings, load_settings

_logger = get_logger("recycle_report.web")

router = APIRouter()


def _settings(request: Request) -> ReportSettings:
    return request.app.state.settings


def _search_filters(
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
    order_id: Annotated[str | None, Query(alias="orderId")] = None,
    category_id: Annotated[str | None, Query(alias="categoryId")] = None,
    sub_category_id: Annotated[str | None, Query(alias="subCategoryId")] = None,
    min_price: Annotated[str | None, Query(alias="minPrice")] = None,
    max_price: Annotated[str | None, Query(alias="maxPrice")] = None,
    grade: Annotated[str | None, Query()] = None,
    keyword: Annotated[str | None, Query()] = None,
) -> SearchFilters:
    try:
        return SearchFilters(
            start_date=start_date,
            end_date=end_date,
            order_id=order_id,
            category_id=category_id,
            sub_category_id=sub_category_id,
            min_price=min_price,
            max_price=max_price,
            grade=grade,
            keyword=keyword,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": err["loc"], "msg": err["msg"]} for err in e.errors()],
        ) from e


@router.get("/search")
def search_route(
    filters: Annotated[SearchFilters, Depends(_search_filters)],
    settings: Annotated[ReportSettings, Depends(_settings)],
) -> Any:
    try:
        result = api.search(filters, settings=settings)
    except Exception:
        _logger.exception("web:search_failed")
        return JSONResponse(
            status_code=500, content={"message": "Error fetching or processing data"}
        )
    return result.model_dump(mode="json", by_alias=True)


@router.get("/categories")
def categories_route(settings: Annotated[ReportSettings, Depends(_settings)]) -> Any:
    try:
        options = api.list_categories(settings=settings)
    except Exception:
        _logger.exception("web:categories_failed")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch categories"})
    return {"data": [o.model_dump(mode="json", by_alias=True) for o in options]}


@router.get("/subcategories/{category_id}")
def subcategories_route(
    category_id: str, settings: Annotated[ReportSettings, Depends(_settings)]
) -> Any:
    try:
        options = api.list_subcategories(category_id, settings=settings)
    except Exception:
        _logger.exception("web:subcategories_failed category_id=%s", category_id)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch subcategories"})
    return {"data": [o.model_dump(mode="json", by_alias=True) for o in options]}


def create_app(settings: ReportSettings | None = None) -> FastAPI:
    """Build the FastAPI application with the report routes mounted."""

    configure_logging()
    app = FastAPI(title="recycle-report")
    app.state.settings = settings or load_settings()
    app.include_router(router)
    return app


__all__ = ["router", "create_app"]
