import logging
from datetime import datetime
from typing import List, Optional

from carwash_crm import schemas
from carwash_crm.intervals import appointment_window, overlaps, to_local_naive

logger = logging.getLogger(__name__)


def conflicting_appointment(store, bay_id: int, start: datetime,
                            exclude_id: Optional[int] = None) -> Optional[schemas.Appointment]:
    """Первая активная запись на месте bay_id, пересекающаяся с окном от start"""
    start, end = appointment_window(start)
    for appointment in store.appointments:
        if appointment.wash_bay_id != bay_id or appointment.id == exclude_id:
            continue
        # Отменённые и выполненные записи место не занимают
        if appointment.status not in schemas.ACTIVE_STATUSES:
            continue
        appt_start, appt_end = appointment_window(appointment.date_time)
        if overlaps(start, end, appt_start, appt_end):
            return appointment
    return None


def find_available_bays(store, car_wash_id: int, target: datetime) -> List[schemas.WashBay]:
    if store.find("carwashes", car_wash_id) is None:
        return []

    target = to_local_naive(target)
    available = [
        bay for bay in store.washbays
        if bay.is_active
        and bay.car_wash_id == car_wash_id
        and conflicting_appointment(store, bay.id, target) is None
    ]
    logger.debug("Свободных мест на мойке %s в %s: %d", car_wash_id, target, len(available))
    return available
