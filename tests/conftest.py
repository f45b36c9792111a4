"""Shared test fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from paybuilder.database import get_session
from paybuilder.main import app
from paybuilder.models.audit import Base
from paybuilder.models.base import Address
from paybuilder.models.payment_methods import CreditCardData, ECheck
from paybuilder.providers.container import services
from paybuilder.providers.mock_provider import MockGateway


@pytest.fixture
def gateway():
    """A zero-latency mock gateway registered as the default config."""
    services.reset()
    gw = MockGateway(supports_hosted_payments=True, latency_ms=0)
    services.configure(gw)
    yield gw
    services.reset()


@pytest.fixture
def no_hpp_gateway():
    """A default gateway without hosted payment page support."""
    services.reset()
    gw = MockGateway(supports_hosted_payments=False, latency_ms=0)
    services.configure(gw)
    yield gw
    services.reset()


@pytest.fixture
def card():
    return CreditCardData(number="4111111111111111", exp_month=12, exp_year=2030, cvn="123")


@pytest.fixture
def echeck():
    return ECheck(account_number="24413815", routing_number="490000018", check_holder_name="Jane Doe")


@pytest.fixture
def address():
    return Address(street_address_1="6860 Dallas Pkwy", city="Plano", state="TX", postal_code="75024", country="US")


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, gateway: MockGateway):
    """HTTP client against the app, wired to the in-memory database and mock gateway."""

    async def _session_override():
        yield db_session

    app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
