# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for customer reads, writes and the category report."""
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from app.core.logging import get_logger
from app.metrics import CATEGORY_REPORTS, CUSTOMER_WRITES, CUSTOMERS_TOTAL, VALIDATION_ERRORS
from app.models.domain import (
    CategoryData, Customer, CustomerFilter, PageRequest, ValidationError, ValidationResult,
)
from app.repositories.customer_repository import CustomerRepository
from app.services.validation import RuleSetValidator

logger = get_logger(__name__)

EMAIL_NOT_UNIQUE = "Email not unique"
TWO_PLACES = Decimal("0.01")


def _normalise(customer: Customer) -> Customer:
    """Blank email/category are stored as NULL."""
    updates = {}
    if customer.email is not None and not customer.email.strip():
        updates["email"] = None
    if customer.category is not None and not customer.category.strip():
        updates["category"] = None
    return customer.model_copy(update=updates) if updates else customer


class CustomerService:
    def __init__(self, repo: CustomerRepository, validator: Optional[RuleSetValidator] = None):
        self._repo = repo
        self._validator = validator or RuleSetValidator()

    def seed_gauges(self):
        CUSTOMERS_TOTAL.set(self._repo.count())
        logger.info("Prometheus gauges loaded from DB")

    # ── Read ───────────────────────────────────────────────────────────

    def read(self, customer_filter: CustomerFilter,
             page_request: PageRequest) -> Tuple[int, List[Customer]]:
        return self._repo.find_page(customer_filter, page_request)

    # ── Write ──────────────────────────────────────────────────────────

    def create(self, customer: Customer) -> ValidationResult:
        result = self._validate_and_save(customer, "create")
        if result.valid:
            CUSTOMERS_TOTAL.inc()
            logger.info("Customer created id=%s", result.entity.id)
        return result

    def update(self, customer: Customer) -> ValidationResult:
        result = self._validate_and_save(customer, "update")
        if result.valid:
            logger.info("Customer updated id=%s", result.entity.id)
        return result

    def destroy(self, customer: Customer) -> None:
        self._repo.delete(customer)
        CUSTOMER_WRITES.labels(operation="destroy").inc()
        CUSTOMERS_TOTAL.dec()
        logger.info("Customer destroyed id=%s", customer.id)

    def validate(self, customer: Customer) -> List[ValidationError]:
        errors = self._validator.validate(customer)
        not_unique = self._check_email_unique(customer)
        if not_unique is not None:
            errors.append(not_unique)
        return errors

    def _validate_and_save(self, customer: Customer, operation: str) -> ValidationResult:
        customer = _normalise(customer)
        errors = self.validate(customer)
        if errors:
            for error in errors:
                VALIDATION_ERRORS.labels(field=error.field).inc()
            logger.info("Customer %s rejected id=%s fields=%s",
                        operation, customer.id, [e.field for e in errors])
            return ValidationResult(entity=customer, errors=errors)

        saved = self._repo.save(customer)
        CUSTOMER_WRITES.labels(operation=operation).inc()
        return ValidationResult(entity=saved)

    def _check_email_unique(self, customer: Customer) -> Optional[ValidationError]:
        if not customer.email or not customer.email.strip():
            return None
        existing = self._repo.find_by_email(customer.email)
        if existing is not None and (customer.id is None or existing.id != customer.id):
            return ValidationError(field="email", messages=[EMAIL_NOT_UNIQUE])
        return None

    # ── Report ─────────────────────────────────────────────────────────

    def category_report(self) -> List[CategoryData]:
        total = self._repo.count()
        CATEGORY_REPORTS.inc()
        if total == 0:
            return []
        result = []
        for category, count in self._repo.count_by_category():
            if category is None:
                continue
            percentage = (Decimal(count * 100) / Decimal(total)).quantize(
                TWO_PLACES, rounding=ROUND_HALF_UP
            )
            result.append(CategoryData(category=category, percentage=percentage))
        return result
