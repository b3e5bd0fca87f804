"""Public interface for the ``recycle_report`` package.

Re-exports the API functions and public models as the stable import surface.
No runtime logic lives here.
"""

from .aggregate import aggregate, totalize
from .api import list_categories, list_subcategories, run_search, search
from .filters import apply_filters
from .models import (
    Category,
    CategoryOption,
    Group,
    LineItem,
    SearchFilters,
    SearchResult,
    Side,
    Subcategory,
    SubcategoryOption,
    SummaryRecord,
    TaxonomySource,
    TotalRecord,
    Transaction,
    TransactionSource,
)
from .normalizers import normalize_category_id, normalize_subcategory_id
from .settings import ReportSettings, load_settings
from .taxonomy import TaxonomyIndex
from .upstream import UpstreamFetchError

__all__ = [
    # API
    "search",
    "run_search",
    "list_categories",
    "list_subcategories",
    # Pipeline
    "TaxonomyIndex",
    "apply_filters",
    "aggregate",
    "totalize",
    "normalize_category_id",
    "normalize_subcategory_id",
    # Models / types
    "Transaction",
    "Group",
    "LineItem",
    "Side",
    "Category",
    "Subcategory",
    "TransactionSource",
    "TaxonomySource",
    "SearchFilters",
    "SummaryRecord",
    "TotalRecord",
    "SearchResult",
    "CategoryOption",
    "SubcategoryOption",
    # Config / errors
    "ReportSettings",
    "load_settings",
    "UpstreamFetchError",
]
