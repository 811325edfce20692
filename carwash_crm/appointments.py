"""Service for managing appointment lifecycle"""
import logging
from datetime import date
from typing import List, Optional

from carwash_crm import schemas
from carwash_crm.availability import conflicting_appointment
from carwash_crm.errors import ConflictError, NotFound, ValidationError
from carwash_crm.intervals import local_now
from carwash_crm.store import EntityStore, merge_record

logger = logging.getLogger(__name__)

Status = schemas.AppointmentStatus

NOT_FOUND = "Запись не найдена"

# pending -> confirmed -> completed, отмена из любого незавершённого статуса
TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
    Status.CONFIRMED: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}


def is_legal_transition(current: Status, new: Status) -> bool:
    return current == new or new in TRANSITIONS[current]


class AppointmentService:
    """
    Handles appointment operations.

    strict_transitions: reject status changes outside TRANSITIONS.
    enforce_availability: check the wash bay inside the store lock before
        inserting or moving an active appointment, so two bookings can't
        take the same bay at the same time.
    """

    def __init__(self, store: EntityStore, strict_transitions: bool = True,
                 enforce_availability: bool = True):
        self.store = store
        self.strict_transitions = strict_transitions
        self.enforce_availability = enforce_availability

    async def create(self, request: schemas.AppointmentCreate) -> schemas.Appointment:
        data = request.model_dump()
        data["date_time"] = data["date_time"] or local_now()

        async with self.store.mutation():
            appointment = schemas.Appointment(id=self.store.next_id("appointments"), **data)
            if self.enforce_availability:
                self._ensure_bay_free(appointment)
            self.store.appointments.append(appointment)

        logger.info("Создана запись %s на %s", appointment.id, appointment.date_time)
        return appointment

    async def update(self, appointment_id: int, patch: schemas.AppointmentUpdate) -> schemas.Appointment:
        changes = patch.model_dump(exclude_unset=True, by_alias=True)

        async with self.store.mutation():
            index = self.store.index_of("appointments", appointment_id)
            if index is None:
                raise NotFound(NOT_FOUND)
            current = self.store.appointments[index]

            new_status = changes.get("status")
            if (new_status is not None and self.strict_transitions
                    and not is_legal_transition(current.status, new_status)):
                raise ValidationError(
                    f"Недопустимая смена статуса: {current.status.value} -> {Status(new_status).value}"
                )

            updated = merge_record(current, changes)
            if self.enforce_availability and self._needs_bay_check(current, updated):
                self._ensure_bay_free(updated)
            self.store.appointments[index] = updated

        return updated

    async def delete(self, appointment_id: int) -> None:
        async with self.store.mutation():
            index = self.store.index_of("appointments", appointment_id)
            if index is None:
                raise NotFound(NOT_FOUND)
            del self.store.appointments[index]

    def list(self, status: Optional[str] = None, car_wash_id: Optional[int] = None,
             date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[schemas.Appointment]:
        result = list(self.store.appointments)

        if status:
            result = [a for a in result if a.status.value == status]

        if car_wash_id is not None:
            bay_ids = {b.id for b in self.store.washbays if b.car_wash_id == car_wash_id}
            result = [a for a in result if a.wash_bay_id in bay_ids]

        # Границы включительные, сравниваем календарные даты
        if date_from is not None:
            result = [a for a in result if a.date_time.date() >= date_from]
        if date_to is not None:
            result = [a for a in result if a.date_time.date() <= date_to]

        return result

    def recent(self, limit: int = 10) -> List[schemas.Appointment]:
        return sorted(self.store.appointments, key=lambda a: a.date_time, reverse=True)[:limit]

    @staticmethod
    def _needs_bay_check(current: schemas.Appointment, updated: schemas.Appointment) -> bool:
        if updated.status not in schemas.ACTIVE_STATUSES:
            return False
        return (
            current.status not in schemas.ACTIVE_STATUSES
            or current.date_time != updated.date_time
            or current.wash_bay_id != updated.wash_bay_id
        )

    def _ensure_bay_free(self, appointment: schemas.Appointment) -> None:
        if appointment.wash_bay_id is None or appointment.status not in schemas.ACTIVE_STATUSES:
            return

        bay = self.store.find("washbays", appointment.wash_bay_id)
        if bay is None:
            raise NotFound("Моечное место не найдено")
        if not bay.is_active:
            raise ConflictError("Моечное место не активно")

        conflict = conflicting_appointment(
            self.store, bay.id, appointment.date_time, exclude_id=appointment.id
        )
        if conflict is not None:
            logger.info(
                "Место %s на %s занято записью %s", bay.id, appointment.date_time, conflict.id
            )
            raise ConflictError("Моечное место занято на это время")
