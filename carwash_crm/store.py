"""
In-memory entity store with explicit load/flush lifecycle.

All collections live in memory and are persisted as a single JSON document
with the keys listed in COLLECTIONS. Mutations go through ``mutation()``,
which serializes writers on one lock and flushes according to the flush policy.
"""
import asyncio
import json
import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from carwash_crm import schemas
from carwash_crm.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "clients": schemas.Client,
    "cars": schemas.Car,
    "services": schemas.Service,
    "employees": schemas.Employee,
    "appointments": schemas.Appointment,
    "shifts": schemas.Shift,
    "carwashes": schemas.CarWash,
    "washbays": schemas.WashBay,
}


class JsonFileBackend:
    """Stores the document in a JSON file, replacing it atomically on write"""

    def __init__(self, path):
        self.path = Path(path)

    async def read(self) -> Optional[dict]:
        return await asyncio.to_thread(self._read)

    async def write(self, document: dict) -> None:
        await asyncio.to_thread(self._write, document)

    def _read(self):
        if not self.path.exists():
            return None
        try:
            with self.path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Ошибка загрузки данных из {self.path}: {e}") from e

    def _write(self, document):
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Ошибка сохранения данных в {self.path}: {e}") from e


class DatabaseBackend:
    """Stores the document in the store_snapshots table"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def read(self) -> Optional[dict]:
        from carwash_crm.models import SNAPSHOT_ID, StoreSnapshot

        try:
            async with self.session_factory() as session:
                snapshot = await session.get(StoreSnapshot, SNAPSHOT_ID)
                return snapshot.payload if snapshot else None
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Ошибка загрузки данных из БД: {e}") from e

    async def write(self, document: dict) -> None:
        from carwash_crm.models import SNAPSHOT_ID, StoreSnapshot

        try:
            async with self.session_factory() as session:
                await session.merge(StoreSnapshot(id=SNAPSHOT_ID, payload=document))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Ошибка сохранения данных в БД: {e}") from e


class EntityStore:
    def __init__(self, backend, flush_policy: str = "write_through", batch_size: int = 20):
        self.backend = backend
        self.flush_policy = flush_policy
        self.batch_size = batch_size
        self.pending = 0
        self._lock = asyncio.Lock()

        self.clients: List[schemas.Client] = []
        self.cars: List[schemas.Car] = []
        self.services: List[schemas.Service] = []
        self.employees: List[schemas.Employee] = []
        self.appointments: List[schemas.Appointment] = []
        self.shifts: List[schemas.Shift] = []
        self.carwashes: List[schemas.CarWash] = []
        self.washbays: List[schemas.WashBay] = []

    async def load(self):
        document = await self.backend.read()
        if document is None:
            logger.info("Данные не найдены, создаем пустое хранилище")
            await self.flush()
            return

        try:
            for name, schema in COLLECTIONS.items():
                setattr(self, name, [schema.model_validate(r) for r in document.get(name, [])])
        except PydanticValidationError as e:
            raise StorageError(f"Повреждённые данные в хранилище: {e}") from e

        logger.info(
            "Данные загружены: %s",
            ", ".join(f"{name}={len(getattr(self, name))}" for name in COLLECTIONS),
        )

    async def flush(self):
        await self.backend.write(self.to_document())
        self.pending = 0
        logger.debug("Данные сохранены")

    async def close(self):
        if self.pending:
            async with self._lock:
                await self.flush()

    def to_document(self) -> Dict[str, list]:
        return {
            name: [record.model_dump(mode="json", by_alias=True) for record in getattr(self, name)]
            for name in COLLECTIONS
        }

    @asynccontextmanager
    async def mutation(self):
        """
        Exclusive write section.

        On any exception inside the block, or a failed flush, the collections
        are restored to their state before the block.
        """
        async with self._lock:
            snapshot = {name: list(getattr(self, name)) for name in COLLECTIONS}
            try:
                yield self
            except Exception:
                self._restore(snapshot)
                raise

            self.pending += 1
            if self.flush_policy == "write_through" or self.pending >= self.batch_size:
                try:
                    await self.flush()
                except Exception as e:
                    self._restore(snapshot)
                    self.pending -= 1
                    if isinstance(e, StorageError):
                        raise
                    raise StorageError(f"Ошибка сохранения данных: {e!r}") from e

    def _restore(self, snapshot):
        for name, records in snapshot.items():
            setattr(self, name, records)

    # --- Поиск ---

    def find(self, name: str, record_id: int):
        return next((r for r in getattr(self, name) if r.id == record_id), None)

    def index_of(self, name: str, record_id: int) -> Optional[int]:
        return next((i for i, r in enumerate(getattr(self, name)) if r.id == record_id), None)

    def next_id(self, name: str) -> int:
        # Миллисекунды, но всегда больше уже выданных id
        last_id = max((r.id for r in getattr(self, name)), default=0)
        return max(int(time.time() * 1000), last_id + 1)


def merge_record(record: BaseModel, changes: dict) -> BaseModel:
    """Накладывает поля из changes (camelCase или snake_case) на запись, id не меняется"""
    fields = type(record).model_fields
    data = record.model_dump(by_alias=True)
    for key, value in changes.items():
        # snake_case имена полей приводим к camelCase
        field = fields.get(key)
        data[field.alias if field is not None and field.alias else key] = value
    data["id"] = record.id
    try:
        return type(record).model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"Некорректное значение поля {field}: {error['msg']}") from e


def build_store(settings) -> EntityStore:
    if settings.STORAGE_BACKEND == "database":
        from carwash_crm.database import AsyncSessionLocal

        backend = DatabaseBackend(AsyncSessionLocal)
    else:
        backend = JsonFileBackend(settings.DATA_FILE)
    return EntityStore(backend, flush_policy=settings.FLUSH_POLICY, batch_size=settings.FLUSH_BATCH_SIZE)
