# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: customer grid read/create/update/destroy and the category report."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.config import settings
from app.core.dependencies import get_customer_service
from app.models.domain import ALL_CATEGORIES, Category, Customer
from app.schemas import CategoryDataOut, CustomerIn, CustomerOut, CustomerPage, WriteResult
from app.services.customer_service import CustomerService
from app.services.query_builder import build_filter, build_page_request

router = APIRouter(prefix="/api/v1", tags=["Customers"])


@router.get("/customers", response_model=CustomerPage)
def read_customers(
    name: Optional[str] = None,
    category: Optional[str] = None,
    page: Optional[int] = Query(default=None, ge=1, le=settings.MAX_PAGE),
    start: Optional[int] = Query(default=None, ge=0, le=settings.MAX_PAGE * settings.MAX_PAGE_SIZE),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort: Optional[str] = None,
    service: CustomerService = Depends(get_customer_service),
):
    # InvalidCategoryError / InvalidSortError are turned into 400s in main.py
    customer_filter = build_filter(name, category)
    page_request = build_page_request(page, start, limit, sort)
    total, customers = service.read(customer_filter, page_request)
    return CustomerPage(
        total=total, page=page_request.page, limit=page_request.size,
        records=[CustomerOut.from_domain(c) for c in customers],
    )


@router.post("/customers", response_model=WriteResult)
def create_customer(body: CustomerIn,
                    service: CustomerService = Depends(get_customer_service)):
    # A client-supplied id is ignored; storage assigns it.
    customer = body.to_domain().model_copy(update={"id": None})
    return WriteResult.from_result(service.create(customer))


@router.put("/customers/{customer_id}", response_model=WriteResult)
def update_customer(customer_id: int, body: CustomerIn,
                    service: CustomerService = Depends(get_customer_service)):
    return WriteResult.from_result(service.update(body.to_domain(customer_id)))


@router.delete("/customers/{customer_id}")
def destroy_customer(customer_id: int,
                     service: CustomerService = Depends(get_customer_service)):
    service.destroy(Customer(id=customer_id))
    return {"success": True}


@router.get("/customers/categories/report", response_model=List[CategoryDataOut])
def category_report(service: CustomerService = Depends(get_customer_service)):
    return [
        CategoryDataOut(category=cd.category, percentage=cd.percentage)
        for cd in service.category_report()
    ]


@router.get("/categories")
def list_categories():
    return {"categories": [ALL_CATEGORIES] + [c.value for c in Category]}
