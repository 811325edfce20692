import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from carwash_crm.intervals import local_now, to_local_naive


class CamelModel(BaseModel):
    # JSON наружу и в файл данных - в camelCase, как ждёт фронтенд
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Только эти статусы занимают моечное место
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


# --- Справочники ---

class ClientBase(CamelModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    preferences: str = ""


class Client(ClientBase):
    id: int


class CarBase(CamelModel):
    client_ids: List[int] = Field(default_factory=list)
    plate: str = ""
    brand: str = ""
    model: str = ""
    year: Optional[int] = None
    body_type: str = "седан"


class Car(CarBase):
    id: int


class ServiceBase(CamelModel):
    name: str = ""
    type: str = "мойка"
    price: float = Field(0, ge=0)


class Service(ServiceBase):
    id: int


class EmployeeBase(CamelModel):
    name: str = ""
    phone: str = ""
    role: str = ""


class Employee(EmployeeBase):
    id: int


class ShiftBase(CamelModel):
    date: dt.date = Field(default_factory=lambda: local_now().date())
    employee_id: Optional[int] = None
    start: str = ""
    end: str = ""
    cars_count: int = 0


class Shift(ShiftBase):
    id: int


class CarWashBase(CamelModel):
    name: str = ""
    address: str = ""
    is_active: bool = True


class CarWash(CarWashBase):
    id: int


class WashBayBase(CamelModel):
    car_wash_id: Optional[int] = None
    name: str = ""
    description: str = ""
    is_active: bool = True


class WashBay(WashBayBase):
    id: int


# --- Записи ---

class Appointment(CamelModel):
    id: int
    date_time: dt.datetime
    client_id: Optional[int] = None
    car_id: Optional[int] = None
    service_id: Optional[int] = None
    employee_id: Optional[int] = None
    status: AppointmentStatus = AppointmentStatus.PENDING
    price: float = Field(0, ge=0)
    comment: str = ""
    wash_bay_id: Optional[int] = None

    @field_validator("date_time")
    @classmethod
    def normalize_date_time(cls, value: dt.datetime) -> dt.datetime:
        return to_local_naive(value)


class AppointmentCreate(CamelModel):
    date_time: Optional[dt.datetime] = None  # по умолчанию - текущее время
    client_id: Optional[int] = None
    car_id: Optional[int] = None
    service_id: Optional[int] = None
    employee_id: Optional[int] = None
    status: AppointmentStatus = AppointmentStatus.PENDING
    price: float = Field(0, ge=0)
    comment: str = ""
    wash_bay_id: Optional[int] = None


class AppointmentUpdate(CamelModel):
    """Частичное обновление: применяются только переданные поля, id не меняется"""

    date_time: Optional[dt.datetime] = None
    client_id: Optional[int] = None
    car_id: Optional[int] = None
    service_id: Optional[int] = None
    employee_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    price: Optional[float] = Field(None, ge=0)
    comment: Optional[str] = None
    wash_bay_id: Optional[int] = None


# --- Загрузка моек ---

class Slot(CamelModel):
    hour: str
    appointment_id: Optional[int] = None
    status: str


class BaySchedule(CamelModel):
    bay_id: int
    bay_name: str
    slots: List[Slot]


class CarWashLoad(CamelModel):
    car_wash_id: int
    car_wash_name: str
    schedule: List[BaySchedule]


# --- Дашборд и поиск ---

class DashboardStats(CamelModel):
    revenue_today: float
    revenue_week: float
    revenue_month: float
    completed_today: int
    active_week: int
    total_appointments: int
    total_clients: int
    total_cars: int


class DailyCount(CamelModel):
    date: str
    count: int


class ServiceCount(CamelModel):
    name: str
    count: int


class DashboardCharts(CamelModel):
    daily: List[DailyCount]
    top_services: List[ServiceCount]


class SearchResult(CamelModel):
    type: str
    id: int
    text: str
    entity: dict
