from enum import Enum


class MessageEntity(Enum):
    """Top-level sections of the l10n/<lang>.json files."""
    USER = "user"
    ADMIN = "admin"
    COMMON = "common"
