import pytest
import pytest_asyncio
import sys
import os
from datetime import date
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Must be set before hotel_billing.main is imported so the app starts in-memory
os.environ["STORAGE_BACKEND"] = "memory"

import httpx
from httpx import ASGITransport

from hotel_billing.main import app, configure_app_state
from hotel_billing.db.dependencies import create_access_token
from hotel_billing.engine import MenuCatalog, MenuRecord, OrderAggregator
from hotel_billing.storage import InMemoryStorage, SQLAlchemyStorage


TODAY = date(2026, 10, 19)

STANDARD_MENU = [
    # alpha, numeric, description, general, ac
    ("IDL", "101", "Idli", "30.00", "35.00"),
    ("VDA", "102", "Vada", "25.00", "30.00"),
    ("DSA", "103", "Plain Dosa", "45.00", "55.00"),
    ("CFE", "201", "Filter Coffee", "20.00", "25.00"),
]


def seed_standard_menu(storage):
    """Insert STANDARD_MENU and return the created records (ids 1..4)."""
    return [
        storage.add_menu_item(
            alpha_code=alpha,
            numeric_code=numeric,
            description=description,
            general_rate=Decimal(general),
            ac_rate=Decimal(ac),
        )
        for alpha, numeric, description, general, ac in STANDARD_MENU
    ]


@pytest.fixture
def idli():
    """The menu record used throughout the billing examples."""
    return MenuRecord(
        id=7,
        alpha_code="IDL",
        numeric_code="101",
        description="Idli",
        general_rate=Decimal("30.00"),
        ac_rate=Decimal("35.00"),
    )


@pytest.fixture
def vada():
    return MenuRecord(
        id=9,
        alpha_code="VDA",
        numeric_code="102",
        description="Vada",
        general_rate=Decimal("25.00"),
        ac_rate=Decimal("30.00"),
    )


@pytest.fixture
def catalog(idli, vada):
    return MenuCatalog([vada, idli])


@pytest.fixture
def aggregator(catalog):
    return OrderAggregator(catalog)


@pytest.fixture
def memory_storage():
    storage = InMemoryStorage()
    seed_standard_menu(storage)
    return storage


@pytest.fixture
def sql_storage(tmp_path):
    """SQLAlchemyStorage with file-backed database, seeded with STANDARD_MENU."""
    storage = SQLAlchemyStorage(f"sqlite:///{tmp_path / 'billing.db'}", use_alembic=False)
    seed_standard_menu(storage)
    yield storage
    storage.close()


@pytest.fixture(params=["memory", "sqlalchemy"])
def storage(request, tmp_path):
    """Each seeded storage backend in turn."""
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLAlchemyStorage(f"sqlite:///{tmp_path / 'billing.db'}", use_alembic=False)
    seed_standard_menu(backend)
    yield backend
    backend.close()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "SHI", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clerk_headers():
    token = create_access_token({"sub": "RAM", "role": "clerk"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def api_storage(storage):
    """Point the app at the parametrized storage for the duration of a test."""
    original_state = (app.state.storage, app.state.catalog, app.state.sessions)
    configure_app_state(app, storage)
    try:
        yield storage
    finally:
        app.state.storage, app.state.catalog, app.state.sessions = original_state


@pytest_asyncio.fixture
async def async_client(api_storage):
    """Create async HTTP client for testing."""
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
