from fastapi import Depends, Request

from carwash_crm.appointments import AppointmentService
from carwash_crm.config import get_settings
from carwash_crm.store import EntityStore


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_appointment_service(store: EntityStore = Depends(get_store)) -> AppointmentService:
    settings = get_settings()
    return AppointmentService(
        store,
        strict_transitions=settings.STRICT_STATUS_TRANSITIONS,
        enforce_availability=settings.ENFORCE_BAY_AVAILABILITY,
    )
