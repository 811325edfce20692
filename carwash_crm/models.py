from sqlalchemy import Column, Integer, DateTime, JSON
from carwash_crm.database import Base
from datetime import datetime

# Документ хранилища лежит одной строкой с фиксированным id
SNAPSHOT_ID = 1


class StoreSnapshot(Base):
    __tablename__ = "store_snapshots"

    id = Column(Integer, primary_key=True)
    # {"clients": [...], "cars": [...], ..., "washbays": [...]}
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
