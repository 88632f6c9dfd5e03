# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package, re-exports CustomerRepository."""
from app.repositories.customer_repository import CustomerRepository

__all__ = ["CustomerRepository"]
