# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.models.domain import Customer, ValidationResult


class CustomerIn(BaseModel):
    """Write payload. Field rules are checked by the service, not here."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    category: Optional[str] = None

    def to_domain(self, customer_id: Optional[int] = None) -> Customer:
        data = self.model_dump()
        if customer_id is not None:
            data["id"] = customer_id
        return Customer(**data)


class CustomerOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int]
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerOut":
        return cls(**customer.model_dump())


class CustomerPage(BaseModel):
    total: int
    page: int
    limit: int
    records: List[CustomerOut]


class ValidationErrorOut(BaseModel):
    field: str
    messages: List[str]


class WriteResult(BaseModel):
    success: bool
    records: List[CustomerOut]
    validations: List[ValidationErrorOut] = []

    @classmethod
    def from_result(cls, result: ValidationResult) -> "WriteResult":
        return cls(
            success=result.valid,
            records=[CustomerOut.from_domain(result.entity)],
            validations=[ValidationErrorOut(field=e.field, messages=list(e.messages))
                         for e in result.errors],
        )


class CategoryDataOut(BaseModel):
    category: str
    percentage: Decimal

    @field_serializer("percentage")
    def keep_two_places(self, value: Decimal) -> str:
        return f"{value:.2f}"


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
