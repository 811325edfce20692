from datetime import date

from carwash_crm import schemas
from carwash_crm.load_grid import build_load_grid

from conftest import make_appointment

DAY = date(2024, 1, 1)


def slots_by_hour(grid, bay_index=0, wash_index=0):
    return {s.hour: s for s in grid[wash_index].schedule[bay_index].slots}


def test_fourteen_slots_per_bay(store, location):
    store.washbays.append(schemas.WashBay(id=11, car_wash_id=1, name="Пост №2"))

    grid = build_load_grid(store, DAY)

    assert len(grid) == 1
    assert [s.bay_id for s in grid[0].schedule] == [10, 11]
    for entry in grid[0].schedule:
        assert len(entry.slots) == 14
        assert entry.slots[0].hour == "8:00"
        assert entry.slots[-1].hour == "21:00"


def test_empty_day_is_free(store, location):
    grid = build_load_grid(store, DAY)

    assert all(s.status == "free" and s.appointment_id is None for s in grid[0].schedule[0].slots)


def test_appointment_fills_overlapping_slots(store, location):
    store.appointments.append(make_appointment(1, "2024-01-01T10:30", status="pending"))

    slots = slots_by_hour(build_load_grid(store, DAY))

    assert slots["10:00"].appointment_id == 1
    assert slots["10:00"].status == "pending"
    assert slots["11:00"].appointment_id == 1
    assert slots["9:00"].status == "free"
    assert slots["12:00"].status == "free"


def test_cancelled_ignored_completed_shown(store, location):
    store.appointments.append(make_appointment(1, "2024-01-01T10:00", status="cancelled"))
    store.appointments.append(make_appointment(2, "2024-01-01T12:00", status="completed"))

    slots = slots_by_hour(build_load_grid(store, DAY))

    assert slots["10:00"].status == "free"
    assert slots["12:00"].status == "completed"
    assert slots["12:00"].appointment_id == 2


def test_first_appointment_in_store_order_wins(store, location):
    store.appointments.append(make_appointment(5, "2024-01-01T14:00", status="pending"))
    store.appointments.append(make_appointment(3, "2024-01-01T14:00", status="confirmed"))

    slots = slots_by_hour(build_load_grid(store, DAY))

    assert slots["14:00"].appointment_id == 5


def test_other_days_ignored(store, location):
    store.appointments.append(make_appointment(1, "2024-01-02T10:00"))

    slots = slots_by_hour(build_load_grid(store, DAY))

    assert slots["10:00"].status == "free"


def test_every_location_listed(store, location):
    store.carwashes.append(schemas.CarWash(id=2, name="Филиал Северный"))
    store.washbays.append(schemas.WashBay(id=20, car_wash_id=2, name="Бокс А"))
    store.washbays.append(schemas.WashBay(id=21, car_wash_id=2, name="Бокс Б"))
    store.carwashes.append(schemas.CarWash(id=3, name="Мойка Премиум", is_active=False))

    grid = build_load_grid(store, DAY)

    assert [(w.car_wash_id, w.car_wash_name) for w in grid] == [
        (1, "Главная мойка"), (2, "Филиал Северный"), (3, "Мойка Премиум"),
    ]
    assert [len(w.schedule) for w in grid] == [1, 2, 0]
    assert grid[1].schedule[1].bay_name == "Бокс Б"
