"""
Models Package

Pydantic wire/view models plus the one SQLAlchemy model (StorageEntry).
Importing StorageEntry here registers it on Base.metadata.
"""

from models.base import Base
from models.storage_entry import StorageEntry
