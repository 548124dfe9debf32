"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated pagination settings, cache resets
    - Data Fixtures: in-memory brands and products
    - Database Fixtures: SQLAlchemy engine and a seeded session
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from keyset_paging.core.pagination import QueryRecorder, SortField, SortSpecification
from keyset_paging.core.settings import PaginationSettings, clear_all_caches
from tests.models import (
    Base,
    Brand,
    BrandRecord,
    Product,
    ProductRecord,
    make_brands,
    make_products,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep environment-derived settings from leaking between tests."""
    for name in (
        "PAGINATION_MAX_PAGE_SIZE",
        "PAGINATION_DEFAULT_PAGE_SIZE",
        "PAGINATION_CURSOR_SECRET",
        "PAGINATION_LOG_QUERIES",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def settings() -> PaginationSettings:
    """Default limits: max page size 100, no default page size, unsigned cursors."""
    return PaginationSettings(max_page_size=100, _env_file=None)


@pytest.fixture
def recorder() -> QueryRecorder:
    return QueryRecorder()


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def brands() -> list[Brand]:
    return make_brands(100)


@pytest.fixture(scope="session")
def products(brands: list[Brand]) -> list[Product]:
    return make_products(brands[:3], per_brand=100)


@pytest.fixture(scope="session")
def name_sort() -> SortSpecification:
    """(name asc, id asc)."""
    return SortSpecification.of(SortField("name"), SortField("id", unique=True))


@pytest.fixture(scope="session")
def sorted_brands(brands: list[Brand]) -> list[Brand]:
    return sorted(brands, key=lambda b: (b.name, b.id))


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Async SQLAlchemy engine connected to in-memory SQLite."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session over freshly created tables seeded with 10 brands x 20 products.

    Example:
        async def test_page(db_session):
            source = SqlAlchemySource(db_session, select(BrandRecord))
    """
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session_maker() as session:
        seed_brands = make_brands(10)
        session.add_all(
            BrandRecord(id=b.id, name=b.name, country=b.country) for b in seed_brands
        )
        session.add_all(
            ProductRecord(id=p.id, brand_id=p.brand_id, name=p.name, price=p.price)
            for p in make_products(seed_brands, per_brand=20)
        )
        await session.commit()
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
