import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import config
from enums.message_entity import MessageEntity

L10N_DIR = Path(__file__).resolve().parent.parent / "l10n"


class Localizator:

    @staticmethod
    @lru_cache(maxsize=8)
    def _load(language: str) -> dict:
        localization_file = L10N_DIR / f"{language}.json"
        with open(localization_file, "r", encoding="UTF-8") as f:
            return json.loads(f.read())

    @staticmethod
    def get_text(entity: MessageEntity, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given entity and key.

        Args:
            entity: Entity section (ADMIN, USER, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "de", "en").
                  If None, uses config.STORE_LANGUAGE (default).

        Returns:
            Localized text string. Keys missing from the ADMIN/USER section are
            looked up in COMMON.

        Raises:
            KeyError: If the key exists in neither section

        Example:
            text = Localizator.get_text(MessageEntity.USER, "cart_cleared", lang="en")
        """
        language = lang if lang is not None else config.STORE_LANGUAGE
        data = Localizator._load(language)
        section = data[entity.value]
        if key in section:
            return section[key]
        return data[MessageEntity.COMMON.value][key]
