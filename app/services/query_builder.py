# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Turns raw grid read parameters into a CustomerFilter and a PageRequest.

Only a structured description is produced here; the repository decides how
to express it in SQL.
"""

import json
from typing import List, Optional

from app.core.errors import InvalidCategoryError, InvalidSortError
from app.models.domain import ALL_CATEGORIES, Category, CustomerFilter, PageRequest, SortOrder
from app.repositories.customer_repository import SORT_COLUMNS

SORT_DIRECTIONS = ("ASC", "DESC")


def parse_category(value: str) -> Category:
    """Exact, case-sensitive lookup of a Category by name."""
    try:
        return Category[value]
    except KeyError:
        raise InvalidCategoryError(
            f"Unknown category '{value}'. Expected one of "
            f"{', '.join(c.value for c in Category)} or '{ALL_CATEGORIES}'"
        ) from None


def build_filter(name: Optional[str] = None, category: Optional[str] = None) -> CustomerFilter:
    if name is None or not name.strip():
        name = None
    parsed = None
    if category is not None and category.strip() and category != ALL_CATEGORIES:
        parsed = parse_category(category)
    return CustomerFilter(name=name, category=parsed)


def parse_sort(raw: Optional[str]) -> List[SortOrder]:
    """Parse the grid's sort parameter, e.g. ``[{"property": "lastName", "direction": "ASC"}]``."""
    if raw is None or not raw.strip():
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidSortError(f"Malformed sort parameter: {exc}") from None
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, list):
        raise InvalidSortError("Sort parameter must be a list of sort objects")

    orders = []
    for item in items:
        if not isinstance(item, dict) or "property" not in item:
            raise InvalidSortError("Each sort entry needs a 'property'")
        prop = item["property"]
        direction = str(item.get("direction") or "ASC").upper()
        if prop not in SORT_COLUMNS:
            raise InvalidSortError(
                f"Cannot sort by '{prop}'. Sortable: {sorted(SORT_COLUMNS)}"
            )
        if direction not in SORT_DIRECTIONS:
            raise InvalidSortError(f"Sort direction must be one of {SORT_DIRECTIONS}")
        orders.append(SortOrder(property=prop, direction=direction))
    return orders


def build_page_request(page: Optional[int], start: Optional[int], limit: int,
                       sort: Optional[str] = None) -> PageRequest:
    if page is None:
        page = (start // limit) + 1 if start else 1
    return PageRequest(page=page, size=limit, sort=parse_sort(sort))
