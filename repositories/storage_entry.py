from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from models.storage_entry import StorageEntry, StorageEntryDTO


class StorageEntryRepository:
    @staticmethod
    def get_by_key(key: str, session: Session) -> StorageEntryDTO | None:
        stmt = select(StorageEntry).where(StorageEntry.key == key)
        entry = session.execute(stmt).scalar()
        if entry is not None:
            return StorageEntryDTO.model_validate(entry, from_attributes=True)
        else:
            return entry

    @staticmethod
    def upsert(key: str, value: str, session: Session) -> None:
        entry = session.get(StorageEntry, key)
        if entry is None:
            session.add(StorageEntry(key=key, value=value))
        else:
            entry.value = value
        session.flush()

    @staticmethod
    def delete_by_key(key: str, session: Session) -> None:
        stmt = delete(StorageEntry).where(StorageEntry.key == key)
        session.execute(stmt)

    @staticmethod
    def get_all_keys(session: Session) -> list[str]:
        stmt = select(StorageEntry.key).order_by(StorageEntry.key)
        return list(session.execute(stmt).scalars().all())
