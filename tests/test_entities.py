import pytest

from carwash_crm import schemas
from carwash_crm.entities import EntityService, cars_by_client
from carwash_crm.errors import ConflictError, NotFound, ValidationError

from conftest import make_appointment


async def test_create_applies_defaults(store):
    car = await EntityService(store, "cars").create(schemas.CarBase(plate="А123ВС", client_ids=[1]))

    assert car.body_type == "седан"
    assert car.year is None
    assert store.cars == [car]


async def test_update_keeps_id(store, location):
    service = EntityService(store, "washbays")

    updated = await service.update(10, {"id": 999, "isActive": False, "name": "Пост №1 (ремонт)"})

    assert updated.id == 10
    assert updated.is_active is False
    assert store.washbays[0].name == "Пост №1 (ремонт)"


async def test_update_rejects_bad_value(store, location):
    with pytest.raises(ValidationError):
        await EntityService(store, "washbays").update(10, {"isActive": "может быть"})
    assert store.washbays[0].is_active is True


async def test_missing_record_message(store):
    with pytest.raises(NotFound) as exc:
        await EntityService(store, "services").delete(1)
    assert exc.value.message == "Услуга не найдена"


async def test_carwash_with_bays_cannot_be_deleted(store, location):
    carwashes = EntityService(store, "carwashes")

    with pytest.raises(ConflictError):
        await carwashes.delete(1)

    await EntityService(store, "washbays").delete(10)
    await carwashes.delete(1)
    assert store.carwashes == []


async def test_bay_with_appointments_cannot_be_deleted(store, location):
    store.appointments.append(make_appointment(1, "2024-01-01T10:00", status="cancelled"))
    washbays = EntityService(store, "washbays")

    with pytest.raises(ConflictError):
        await washbays.delete(10)
    assert store.washbays == [location]

    store.appointments.clear()
    await washbays.delete(10)
    assert store.washbays == []


async def test_deleting_client_removes_their_cars(store):
    store.clients.append(schemas.Client(id=1, name="Иван Петров"))
    store.cars.extend([
        schemas.Car(id=1, client_ids=[1], plate="А123ВС"),
        schemas.Car(id=2, client_ids=[2], plate="О987КХ"),
        schemas.Car(id=3, client_ids=[1, 2], plate="Е555ТТ"),
    ])

    await EntityService(store, "clients").delete(1)

    assert [c.id for c in store.cars] == [2]


def test_cars_by_client(store):
    store.cars.extend([
        schemas.Car(id=1, client_ids=[1]),
        schemas.Car(id=2, client_ids=[2]),
        schemas.Car(id=3, client_ids=[1, 2]),
    ])

    assert [c.id for c in cars_by_client(store, 2)] == [2, 3]


async def test_update_accepts_snake_case_keys(store, location):
    store.carwashes.append(schemas.CarWash(id=2, name="Филиал Северный"))

    updated = await EntityService(store, "washbays").update(10, {"car_wash_id": 2, "is_active": False})

    assert updated.car_wash_id == 2
    assert updated.is_active is False
