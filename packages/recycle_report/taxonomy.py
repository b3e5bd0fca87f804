"""Category → subcategory lookup built from the product-catalog payload."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .models import Category, CategoryOption, Subcategory, SubcategoryOption, TaxonomySource
from .normalizers import category_id_or_blank, subcategory_id_or_blank


class TaxonomyIndex:
    """Read-only index of categories keyed by their zero-padded id.

    Duplicate category ids are resolved last-write-wins. Lookups normalize
    their arguments, so ``lookup_category(3)`` and ``lookup_category("03")``
    are equivalent. Misses return ``None``; the ``*_name`` helpers supply the
    display fallbacks (``"Category 03"``, ``"SubCategory 0001"``).
    """

    __slots__ = ("_by_id",)

    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self._by_id: dict[str, Category] = {c.category_id: c for c in categories}

    @classmethod
    def from_source(cls, source: TaxonomySource) -> TaxonomyIndex:
        return cls(source.product_list)

    def __len__(self) -> int:
        return len(self._by_id)

    def lookup_category(self, category_id: Any) -> Category | None:
        return self._by_id.get(category_id_or_blank(category_id))

    def lookup_subcategory(self, category_id: Any, sub_category_id: Any) -> Subcategory | None:
        category = self.lookup_category(category_id)
        if category is None:
            return None
        wanted = subcategory_id_or_blank(sub_category_id)
        # Subcategory lists are short; a linear scan is fine.
        for sub in category.subcategory:
            if sub.sub_category_id == wanted:
                return sub
        return None

    def category_name(self, category_id: str) -> str:
        category = self.lookup_category(category_id)
        if category is not None and category.category_name:
            return category.category_name
        return f"Category {category_id}"

    def subcategory_name(self, category_id: str, sub_category_id: str) -> str:
        sub = self.lookup_subcategory(category_id, sub_category_id)
        if sub is not None and sub.sub_category_name:
            return sub.sub_category_name
        return f"SubCategory {sub_category_id}"

    def categories(self) -> list[CategoryOption]:
        return [
            CategoryOption(category_id=c.category_id, category_name=c.category_name)
            for c in self._by_id.values()
        ]

    def subcategories(self, category_id: Any) -> list[SubcategoryOption]:
        category = self.lookup_category(category_id)
        if category is None:
            return []
        return [
            SubcategoryOption(sub_category_id=s.sub_category_id, sub_category_name=s.sub_category_name)
            for s in category.subcategory
        ]


__all__ = ["TaxonomyIndex"]
