# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""FastAPI dependency injection wiring."""
from app.core.database import engine
from app.repositories.customer_repository import CustomerRepository
from app.services.customer_service import CustomerService
from app.services.validation import RuleSetValidator

_repo = CustomerRepository(engine)
_service = CustomerService(_repo, RuleSetValidator())


def get_customer_repo() -> CustomerRepository:
    return _repo


def get_customer_service() -> CustomerService:
    return _service
