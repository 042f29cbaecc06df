"""
Key-value storage backends for the session store.

All backends expose the same three operations (get_item, set_item, remove_item)
on string keys and string values. Any failure of the underlying store surfaces
as StorageUnavailableException so the session store can treat every backend alike.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from db import get_db_session
from exceptions.session import StorageUnavailableException
from repositories.storage_entry import StorageEntryRepository
from services.encryption import EncryptionService

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Interface shared by all storage backends."""

    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Process-lifetime storage. Used when persistence is not configured and in tests."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class DatabaseStorage(KeyValueStorage):
    """SQLite-backed storage; each operation runs in its own short transaction."""

    def __init__(self, session_maker: sessionmaker):
        self._session_maker = session_maker

    def get_item(self, key: str) -> str | None:
        try:
            with get_db_session(self._session_maker) as session:
                entry = StorageEntryRepository.get_by_key(key, session)
        except SQLAlchemyError as e:
            logger.error(f"[Storage] Read failed for key '{key}': {e}")
            raise StorageUnavailableException(key, str(e))
        return entry.value if entry is not None else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with get_db_session(self._session_maker) as session:
                StorageEntryRepository.upsert(key, value, session)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[Storage] Write failed for key '{key}': {e}")
            raise StorageUnavailableException(key, str(e))

    def remove_item(self, key: str) -> None:
        try:
            with get_db_session(self._session_maker) as session:
                StorageEntryRepository.delete_by_key(key, session)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[Storage] Delete failed for key '{key}': {e}")
            raise StorageUnavailableException(key, str(e))


class EncryptedStorage(KeyValueStorage):
    """
    Wraps another backend and encrypts every value with AES-256-GCM.

    A stored value that cannot be decrypted (other secret, tampering) reads as
    absent, the same as a missing entry.
    """

    def __init__(self, inner: KeyValueStorage, secret: str):
        if not secret:
            raise ValueError("Encryption secret cannot be empty")
        self._inner = inner
        self._secret = secret

    def get_item(self, key: str) -> str | None:
        blob = self._inner.get_item(key)
        if blob is None:
            return None
        try:
            return EncryptionService.decrypt_value(blob, key, self._secret)
        except ValueError as e:
            logger.warning(f"[Storage] Discarding undecryptable value for key '{key}': {e}")
            return None

    def set_item(self, key: str, value: str) -> None:
        self._inner.set_item(key, EncryptionService.encrypt_value(value, key, self._secret))

    def remove_item(self, key: str) -> None:
        self._inner.remove_item(key)
