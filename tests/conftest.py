"""
Test configuration and fixtures.

Provides:
- Fresh database schema per test (in-memory SQLite, or DATABASE_URL_TEST)
- Listing factory
- HTTPX AsyncClient with get_db overridden and an acting-user header
"""
import os
from decimal import Decimal
from typing import AsyncGenerator, Callable, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.main import app
from marketplace.core.deps import get_db
from marketplace.db.base import Base
from marketplace.db.enums import ListingStatus, ListingType
from marketplace.db.models import ListingMixin
from marketplace.services import listing_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db_engine() -> Generator[Engine, None, None]:
    """
    Engine with the full schema created for a single test.

    Defaults to in-memory SQLite; set DATABASE_URL_TEST to run against
    PostgreSQL.
    """
    url = os.getenv("DATABASE_URL_TEST")
    if url:
        engine = create_engine(url, pool_pre_ping=True)
    else:
        engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine: Engine) -> Generator[Session, None, None]:
    """Session configured like SessionLocal; app code commits freely."""
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestSession()
    yield session
    session.close()


@pytest.fixture(scope="function")
def make_listing(db: Session) -> Callable[..., ListingMixin]:
    """Factory creating a committed listing of any type."""
    def _make(
        listing_type: ListingType = ListingType.AD,
        user_id: int = 1,
        title: str = "Listing",
        price: Decimal | None = None,
        status: ListingStatus = ListingStatus.ACTIVE,
        **kwargs,
    ) -> ListingMixin:
        return listing_service.create_listing(
            db, listing_type, user_id, title, price=price, status=status, **kwargs
        )

    return _make


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient without an acting user; send X-User-ID per request.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()
