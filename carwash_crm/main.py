import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carwash_crm import dashboard, errors, schemas
from carwash_crm.appointments import AppointmentService
from carwash_crm.availability import find_available_bays
from carwash_crm.config import get_settings
from carwash_crm.dependencies import get_appointment_service, get_store
from carwash_crm.entity_routes import ENTITY_ROUTERS
from carwash_crm.intervals import local_now, parse_date, parse_datetime
from carwash_crm.load_grid import build_load_grid
from carwash_crm.logging_setup import setup_logging
from carwash_crm.store import EntityStore, build_store

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Логика при старте
    setup_logging(settings.LOG_LEVEL, debug=settings.DEBUG)
    if settings.STORAGE_BACKEND == "database":
        from carwash_crm import models  # noqa: F401  регистрирует таблицы
        from carwash_crm.database import create_tables

        await create_tables()

    store = build_store(settings)
    await store.load()
    app.state.store = store
    logger.info("%s запущен, хранилище: %s", settings.APP_NAME, settings.STORAGE_BACKEND)
    yield
    # Логика при выключении: сбрасываем несохранённые изменения
    await store.close()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(errors.CarWashError)
async def carwash_error_handler(request: Request, exc: errors.CarWashError):
    if isinstance(exc, errors.StorageError):
        logger.error("%s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
    return JSONResponse(status_code=400, content={"error": f"Некорректное значение {field}: {error['msg']}"})


def _parse_id(raw: str, field: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise errors.ValidationError(f"Некорректное значение {field}: {raw}")


# --- Моечные места и загрузка ---

@app.get("/api/washbays/available", response_model=List[schemas.WashBay])
async def available_washbays(
        car_wash_id: Optional[str] = Query(None, alias="carWashId"),
        date_time: Optional[str] = Query(None, alias="dateTime"),
        store: EntityStore = Depends(get_store)
):
    if not car_wash_id or not date_time:
        raise errors.ValidationError("Необходимо указать carWashId и dateTime")
    return find_available_bays(store, _parse_id(car_wash_id, "carWashId"), parse_datetime(date_time))


@app.get("/api/load-dashboard", response_model=List[schemas.CarWashLoad])
async def load_dashboard(date: Optional[str] = None, store: EntityStore = Depends(get_store)):
    selected_date = parse_date(date) if date else local_now().date()
    return build_load_grid(store, selected_date)


# --- Записи ---

@app.get("/api/appointments", response_model=List[schemas.Appointment])
async def read_appointments(
        status: Optional[str] = None,
        car_wash_id: Optional[str] = Query(None, alias="carWashId"),
        date_from: Optional[str] = Query(None, alias="dateFrom"),
        date_to: Optional[str] = Query(None, alias="dateTo"),
        service: AppointmentService = Depends(get_appointment_service)
):
    return service.list(
        status=status,
        car_wash_id=_parse_id(car_wash_id, "carWashId") if car_wash_id else None,
        date_from=parse_date(date_from, "dateFrom") if date_from else None,
        date_to=parse_date(date_to, "dateTo") if date_to else None,
    )


@app.get("/api/appointments/recent", response_model=List[schemas.Appointment])
async def read_recent_appointments(
        limit: int = Query(10, ge=1, le=100),
        service: AppointmentService = Depends(get_appointment_service)
):
    return service.recent(limit)


@app.post("/api/appointments", response_model=schemas.Appointment)
async def create_appointment(
        appointment: schemas.AppointmentCreate,
        service: AppointmentService = Depends(get_appointment_service)
):
    return await service.create(appointment)


@app.put("/api/appointments/{appointment_id}", response_model=schemas.Appointment)
async def update_appointment(
        appointment_id: int,
        changes: schemas.AppointmentUpdate,
        service: AppointmentService = Depends(get_appointment_service)
):
    return await service.update(appointment_id, changes)


@app.delete("/api/appointments/{appointment_id}")
async def delete_appointment(
        appointment_id: int,
        service: AppointmentService = Depends(get_appointment_service)
):
    await service.delete(appointment_id)
    return {"success": True}


# --- Дашборд и поиск ---

@app.get("/api/dashboard/stats", response_model=schemas.DashboardStats)
async def dashboard_stats(store: EntityStore = Depends(get_store)):
    return dashboard.build_stats(store)


@app.get("/api/dashboard/charts", response_model=schemas.DashboardCharts)
async def dashboard_charts(store: EntityStore = Depends(get_store)):
    return dashboard.build_charts(store)


@app.get("/api/search", response_model=List[schemas.SearchResult])
async def search(q: str = "", store: EntityStore = Depends(get_store)):
    return dashboard.search(store, q)


# Справочники подключаются после /api/washbays/available
for router in ENTITY_ROUTERS:
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
