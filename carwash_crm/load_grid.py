from datetime import date, datetime, time, timedelta
from typing import List

from carwash_crm import schemas
from carwash_crm.config import get_settings
from carwash_crm.intervals import appointment_window, overlaps

SLOT_LENGTH = timedelta(hours=1)


def _slot(store, bay: schemas.WashBay, slot_start: datetime) -> schemas.Slot:
    slot_end = slot_start + SLOT_LENGTH
    # При пересечении нескольких записей (чего быть не должно) берём первую
    appointment = next(
        (
            a for a in store.appointments
            if a.wash_bay_id == bay.id
            and a.status != schemas.AppointmentStatus.CANCELLED
            and overlaps(slot_start, slot_end, *appointment_window(a.date_time))
        ),
        None,
    )
    return schemas.Slot(
        hour=f"{slot_start.hour}:00",
        appointment_id=appointment.id if appointment else None,
        status=appointment.status.value if appointment else "free",
    )


def build_load_grid(store, day: date) -> List[schemas.CarWashLoad]:
    """Почасовая загрузка всех мест всех моек на выбранный день"""
    settings = get_settings()
    hours = range(settings.SCHEDULE_OPEN_HOUR, settings.SCHEDULE_CLOSE_HOUR)

    result = []
    for car_wash in store.carwashes:
        schedule = [
            schemas.BaySchedule(
                bay_id=bay.id,
                bay_name=bay.name,
                slots=[_slot(store, bay, datetime.combine(day, time(hour))) for hour in hours],
            )
            for bay in store.washbays
            if bay.car_wash_id == car_wash.id
        ]
        result.append(schemas.CarWashLoad(
            car_wash_id=car_wash.id,
            car_wash_name=car_wash.name,
            schedule=schedule,
        ))
    return result
