"""
Configuración de pytest para tests

Cada test recibe una base de datos Mongo en memoria (mongomock-motor) con los
mismos índices que producción; la app usa esa base vía dependency_overrides.
"""
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from petspa.config import Settings
from petspa.db import ensure_indexes, get_db
from petspa.security import create_access_token
from petspa.services.availability import AvailabilityQuery
from petspa.services.booking_ledger import BookingLedger
from petspa.services.catalog import CatalogStore
from petspa.services.shift_calendar import ShiftCalendar
from petspa.utils import to_decimal128


@pytest.fixture
async def test_db():
    """Base de datos limpia para cada test"""
    client = AsyncMongoMockClient()
    db = client[f"petspa_test_{uuid4().hex}"]
    await ensure_indexes(db)
    yield db


# ---------- motor (sin HTTP) ----------

@pytest.fixture
def catalog(test_db):
    return CatalogStore(test_db)

@pytest.fixture
def calendar(test_db, catalog):
    return ShiftCalendar(test_db, catalog)

@pytest.fixture
def availability(calendar, catalog):
    return AvailabilityQuery(calendar, catalog)

@pytest.fixture
def ledger(test_db, catalog, availability):
    return BookingLedger(test_db, catalog, availability, Settings())


# ---------- datos ----------

@pytest.fixture
def make_customer(test_db):
    async def _make(full_name="Marta Gil", phone_number="+34611111111"):
        res = await test_db.customers.insert_one({
            "full_name": full_name,
            "phone_number": phone_number,
            "email": None,
            "address": None,
            "created_at": datetime.utcnow(),
        })
        return str(res.inserted_id)
    return _make

@pytest.fixture
def make_pet(test_db):
    async def _make(owner_id, name="Toby", species="Dog"):
        res = await test_db.pets.insert_one({
            "owner_id": owner_id,
            "name": name,
            "species": species,
            "created_at": datetime.utcnow(),
        })
        return str(res.inserted_id)
    return _make

@pytest.fixture
def make_service(test_db):
    async def _make(name, price, duration_minutes=30, is_active=True):
        res = await test_db.services.insert_one({
            "name": name,
            "description": None,
            "price": to_decimal128(Decimal(price)),
            "duration_minutes": duration_minutes,
            "is_active": is_active,
        })
        return str(res.inserted_id)
    return _make

@pytest.fixture
def make_staff(test_db):
    async def _make(full_name="Laura Martín", email=None, role="STAFF", is_active=True, password_hash="x"):
        res = await test_db.users.insert_one({
            "email": email or f"{uuid4().hex[:8]}@petspa.com",
            "password_hash": password_hash,
            "full_name": full_name,
            "phone_number": None,
            "role": role,
            "is_active": is_active,
            "created_at": datetime.utcnow(),
        })
        return str(res.inserted_id)
    return _make

@pytest.fixture
def make_shift_type(test_db):
    async def _make(name, start_time, end_time):
        res = await test_db.shift_types.insert_one({
            "name": name, "start_time": start_time, "end_time": end_time,
        })
        return str(res.inserted_id)
    return _make


# ---------- HTTP ----------

@pytest.fixture
async def client(test_db):
    """Cliente ASGI contra la app, con la base de datos de test"""
    from petspa.main import app

    async def _override_db():
        return test_db

    app.dependency_overrides[get_db] = _override_db
    # Deshabilitar rate limiting en la app para tests
    app.state.limiter = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
async def admin_headers(make_staff):
    admin_id = await make_staff(full_name="Admin PetSpa", email="admin@petspa.com", role="ADMIN")
    return {"Authorization": f"Bearer {create_access_token(admin_id)}"}

@pytest.fixture
async def staff_headers(make_staff):
    staff_id = await make_staff(full_name="Recepción", email="front@petspa.com", role="STAFF")
    return {"Authorization": f"Bearer {create_access_token(staff_id)}"}
