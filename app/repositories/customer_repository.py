# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for customers."""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import customers_table
from app.core.errors import StorageError
from app.core.logging import get_logger
from app.models.domain import Customer, CustomerFilter, PageRequest

logger = get_logger(__name__)

CUSTOMER_COLS = "id, first_name, last_name, email, category"

# Public sort property -> column. ORDER BY is only ever built from these.
SORT_COLUMNS: Dict[str, str] = {
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "category": "category",
}


def _row_to_customer(row) -> Customer:
    return Customer(
        id=row[0],
        first_name=row[1],
        last_name=row[2],
        email=row[3],
        category=row[4],
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where_clause(customer_filter: CustomerFilter) -> Tuple[str, Dict[str, Any]]:
    conditions = []
    params: Dict[str, Any] = {}
    if customer_filter.name:
        # Both sides folded by the database's LOWER(); on SQLite that is ASCII-only.
        conditions.append(
            "(LOWER(first_name) LIKE LOWER(:name) ESCAPE '\\' "
            "OR LOWER(last_name) LIKE LOWER(:name) ESCAPE '\\')"
        )
        params["name"] = f"%{_escape_like(customer_filter.name)}%"
    if customer_filter.category is not None:
        conditions.append("category = :category")
        params["category"] = customer_filter.category.value
    where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
    return where, params


def _order_clause(page_request: PageRequest) -> str:
    orders = [
        f"{SORT_COLUMNS[s.property]} {s.direction.upper()}"
        for s in page_request.sort
    ]
    return " ORDER BY " + ", ".join(orders or ["id ASC"])


class CustomerRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Storage failure during %s: %s", action, exc, exc_info=True)
            raise StorageError(f"Storage failure during {action}: {exc}") from exc

    # ── Write ──────────────────────────────────────────────────────────

    def save(self, customer: Customer) -> Customer:
        """Insert when ``customer.id`` is None, otherwise update in place."""
        values = {
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "category": customer.category,
        }
        if customer.id is None:
            with self._storage("insert"), self._engine.begin() as conn:
                result = conn.execute(customers_table.insert().values(**values))
                new_id = result.inserted_primary_key[0]
            return customer.model_copy(update={"id": new_id})

        with self._storage("update"), self._engine.begin() as conn:
            result = conn.execute(
                text("""
                    UPDATE customers
                    SET first_name = :first_name, last_name = :last_name,
                        email = :email, category = :category
                    WHERE id = :id
                """),
                {**values, "id": customer.id},
            )
            if result.rowcount == 0:
                raise StorageError(f"Customer {customer.id} does not exist")
        return customer

    def delete(self, customer: Customer) -> None:
        if customer.id is None:
            raise StorageError("Cannot delete a customer without an id")
        with self._storage("delete"), self._engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM customers WHERE id = :id"), {"id": customer.id}
            )
            if result.rowcount == 0:
                raise StorageError(f"Customer {customer.id} does not exist")

    # ── Read ───────────────────────────────────────────────────────────

    def find_page(self, customer_filter: CustomerFilter,
                  page_request: PageRequest) -> Tuple[int, List[Customer]]:
        where, params = _where_clause(customer_filter)
        order = _order_clause(page_request)
        with self._storage("read"), self._engine.connect() as conn:
            total = conn.execute(text(f"SELECT COUNT(*) FROM customers{where}"), params).scalar()
            rows = conn.execute(
                text(f"SELECT {CUSTOMER_COLS} FROM customers{where}{order} "
                     "LIMIT :limit OFFSET :offset"),
                {**params, "limit": page_request.size, "offset": page_request.offset},
            ).fetchall()
        return total or 0, [_row_to_customer(r) for r in rows]

    def find_by_id(self, customer_id: int) -> Optional[Customer]:
        with self._storage("read"), self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {CUSTOMER_COLS} FROM customers WHERE id = :id"),
                {"id": customer_id},
            ).fetchone()
        return _row_to_customer(row) if row else None

    def find_by_email(self, email: str) -> Optional[Customer]:
        with self._storage("email lookup"), self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {CUSTOMER_COLS} FROM customers "
                     "WHERE LOWER(email) = LOWER(:email) ORDER BY id LIMIT 1"),
                {"email": email},
            ).fetchone()
        return _row_to_customer(row) if row else None

    def count(self) -> int:
        with self._storage("count"), self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM customers")).scalar() or 0

    def count_by_category(self) -> List[Tuple[Optional[str], int]]:
        with self._storage("category count"), self._engine.connect() as conn:
            rows = conn.execute(text("""
                SELECT category, COUNT(*) FROM customers
                GROUP BY category
                ORDER BY category
            """)).fetchall()
        return [(r[0], r[1] or 0) for r in rows]

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
