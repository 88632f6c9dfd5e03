# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models. Pure data structures, no FastAPI dependency.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

ALL_CATEGORIES = "All"


class Category(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


CATEGORY_NAMES = tuple(c.value for c in Category)


class Customer(BaseModel):
    """A customer record. ``id`` is None until storage assigns one."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    category: Optional[str] = None


class SortOrder(BaseModel):
    property: str
    direction: str = "ASC"


class PageRequest(BaseModel):
    """One page of a result set; ``page`` is 1-based."""
    page: int = Field(1, ge=1)
    size: int = Field(25, ge=1)
    sort: List[SortOrder] = []

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


class CustomerFilter(BaseModel):
    name: Optional[str] = None
    category: Optional[Category] = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.category is None


class ValidationError(BaseModel):
    field: str
    messages: List[str]


class ValidationResult(BaseModel):
    entity: Customer
    errors: List[ValidationError] = []

    @property
    def valid(self) -> bool:
        return not self.errors


class CategoryData(BaseModel):
    category: str
    percentage: Decimal
