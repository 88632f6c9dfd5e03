# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: a fresh in-memory SQLite database per test."""
import pytest
from fastapi.testclient import TestClient

from app.core.database import build_engine, create_schema
from app.core.dependencies import get_customer_repo, get_customer_service
from app.models.domain import Customer
from app.repositories.customer_repository import CustomerRepository
from app.services.customer_service import CustomerService
from main import app


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return CustomerRepository(engine)


@pytest.fixture
def service(repo):
    return CustomerService(repo)


@pytest.fixture
def client(repo, service):
    app.dependency_overrides[get_customer_service] = lambda: service
    app.dependency_overrides[get_customer_repo] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def add_customer(repo):
    """Insert straight through the repository, skipping validation."""
    def _add(first_name="Jane", last_name="Doe", email=None, category=None):
        return repo.save(Customer(
            first_name=first_name, last_name=last_name, email=email, category=category,
        ))
    return _add
