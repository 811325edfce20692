from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from carwash_crm import schemas
from carwash_crm.dependencies import get_store
from carwash_crm.entities import EntityService, cars_by_client
from carwash_crm.store import EntityStore


def entity_router(kind: str, create_schema, record_schema, with_get: bool = False) -> APIRouter:
    """Стандартные list/create/update/delete для справочника kind"""
    router = APIRouter(prefix=f"/api/{kind}", tags=[kind])

    def get_service(store: EntityStore = Depends(get_store)) -> EntityService:
        return EntityService(store, kind)

    @router.get("", response_model=List[record_schema])
    async def list_records(service: EntityService = Depends(get_service)):
        return service.list()

    if with_get:
        @router.get("/{record_id}", response_model=record_schema)
        async def read_record(record_id: int, service: EntityService = Depends(get_service)):
            return service.get(record_id)

    @router.post("", response_model=record_schema)
    async def create_record(payload: create_schema, service: EntityService = Depends(get_service)):
        return await service.create(payload)

    @router.put("/{record_id}", response_model=record_schema)
    async def update_record(record_id: int, changes: Dict[str, Any] = Body(...),
                            service: EntityService = Depends(get_service)):
        return await service.update(record_id, changes)

    @router.delete("/{record_id}")
    async def delete_record(record_id: int, service: EntityService = Depends(get_service)):
        await service.delete(record_id)
        return {"success": True}

    return router


cars_router = APIRouter(prefix="/api/cars", tags=["cars"])


@cars_router.get("/by-client/{client_id}", response_model=List[schemas.Car])
async def read_cars_by_client(client_id: int, store: EntityStore = Depends(get_store)):
    return cars_by_client(store, client_id)


ENTITY_ROUTERS = [
    entity_router("clients", schemas.ClientBase, schemas.Client, with_get=True),
    cars_router,
    entity_router("cars", schemas.CarBase, schemas.Car),
    entity_router("services", schemas.ServiceBase, schemas.Service),
    entity_router("employees", schemas.EmployeeBase, schemas.Employee),
    entity_router("shifts", schemas.ShiftBase, schemas.Shift),
    entity_router("carwashes", schemas.CarWashBase, schemas.CarWash),
    entity_router("washbays", schemas.WashBayBase, schemas.WashBay),
]
