from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient

from carwash_crm import schemas
from carwash_crm.appointments import AppointmentService
from carwash_crm.dependencies import get_store
from carwash_crm.main import app
from carwash_crm.store import EntityStore, JsonFileBackend


@pytest.fixture
async def store(tmp_path):
    store = EntityStore(JsonFileBackend(tmp_path / "crm_data.json"))
    await store.load()
    return store


@pytest.fixture
def location(store):
    """Мойка 1 с активным местом 10"""
    store.carwashes.append(schemas.CarWash(id=1, name="Главная мойка", address="ул. Центральная, 1"))
    bay = schemas.WashBay(id=10, car_wash_id=1, name="Пост №1")
    store.washbays.append(bay)
    return bay


@pytest.fixture
def service(store):
    return AppointmentService(store)


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_appointment(appointment_id, when, bay_id=10, status="confirmed", **fields):
    return schemas.Appointment(
        id=appointment_id,
        date_time=datetime.fromisoformat(when),
        wash_bay_id=bay_id,
        status=status,
        **fields,
    )
