"""CRUD for reference entities: clients, cars, services, employees, shifts, carwashes, washbays"""
import logging
from typing import List

from pydantic import BaseModel

from carwash_crm.errors import ConflictError, NotFound
from carwash_crm.store import COLLECTIONS, EntityStore, merge_record

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGES = {
    "clients": "Клиент не найден",
    "cars": "Автомобиль не найден",
    "services": "Услуга не найдена",
    "employees": "Сотрудник не найден",
    "shifts": "Смена не найдена",
    "carwashes": "Мойка не найдена",
    "washbays": "Моечное место не найдено",
}


class EntityService:
    def __init__(self, store: EntityStore, kind: str):
        self.store = store
        self.kind = kind
        self.schema = COLLECTIONS[kind]
        self.not_found = NOT_FOUND_MESSAGES[kind]

    def list(self) -> List[BaseModel]:
        return list(getattr(self.store, self.kind))

    def get(self, record_id: int) -> BaseModel:
        record = self.store.find(self.kind, record_id)
        if record is None:
            raise NotFound(self.not_found)
        return record

    async def create(self, payload: BaseModel) -> BaseModel:
        async with self.store.mutation():
            record = self.schema(id=self.store.next_id(self.kind), **payload.model_dump())
            getattr(self.store, self.kind).append(record)
        return record

    async def update(self, record_id: int, changes: dict) -> BaseModel:
        async with self.store.mutation():
            records = getattr(self.store, self.kind)
            index = self.store.index_of(self.kind, record_id)
            if index is None:
                raise NotFound(self.not_found)
            records[index] = merge_record(records[index], changes)
        return records[index]

    async def delete(self, record_id: int) -> None:
        async with self.store.mutation():
            self._check_dependents(record_id)

            records = getattr(self.store, self.kind)
            index = self.store.index_of(self.kind, record_id)
            if index is None:
                raise NotFound(self.not_found)
            del records[index]

            if self.kind == "clients":
                # Машины клиента удаляются вместе с ним
                self.store.cars = [c for c in self.store.cars if record_id not in c.client_ids]

        logger.info("Удалено: %s %s", self.kind, record_id)

    def _check_dependents(self, record_id: int) -> None:
        if self.kind == "carwashes" and any(b.car_wash_id == record_id for b in self.store.washbays):
            raise ConflictError("Нельзя удалить мойку с привязанными местами")
        if self.kind == "washbays" and any(a.wash_bay_id == record_id for a in self.store.appointments):
            raise ConflictError("Нельзя удалить место с привязанными записями")


def cars_by_client(store: EntityStore, client_id: int):
    return [car for car in store.cars if client_id in car.client_ids]
