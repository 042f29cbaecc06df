# key-value entries backing the persistent session store. One row per storage key
# (token, user profile, admin token, admin profile); values are opaque strings and
# may be ciphertext when session encryption is enabled
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, Text, DateTime

from models.base import Base


class StorageEntry(Base):
    __tablename__ = "storage_entries"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class StorageEntryDTO(BaseModel):
    key: str | None = None
    value: str | None = None
    updated_at: datetime | None = None
