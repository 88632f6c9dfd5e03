# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine singleton and the customers table definition."""
from sqlalchemy import Column, Index, Integer, MetaData, String, Table, create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings

metadata = MetaData()

customers_table = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("email", String(255)),
    Column("category", String(16)),
)

# Storage-level backstop for the email uniqueness rule.
Index("uq_customers_email_lower", func.lower(customers_table.c.email), unique=True)


def build_engine(url: str) -> Engine:
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def create_schema(bind: Engine) -> None:
    metadata.create_all(bind)


engine = build_engine(settings.DATABASE_URL)
