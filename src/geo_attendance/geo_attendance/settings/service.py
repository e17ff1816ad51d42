from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import DEFAULT_SETTING_CATEGORY
from ..core.exceptions import NotFoundError, ValidationError
from .model import Setting
from .repository import SettingRepository

logger = logging.getLogger(__name__)


class SettingService:
    """Administrator write path for policy settings."""

    def __init__(self, settings: SettingRepository):
        self._settings = settings

    def set_setting(
        self,
        *,
        key: str,
        value: Any,
        description: Optional[str] = None,
        category: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Setting:
        key = require_non_empty(key, "Key")
        if value is None or value == "":
            raise ValidationError("Value is required")
        description = require_max_length(description, "Description")
        category = require_max_length(category, "Category", 50)

        existing = self._settings.get(key)
        if existing is None:
            setting = Setting(
                key=key,
                value=Setting.serialize(value),
                description=description or "",
                category=category or DEFAULT_SETTING_CATEGORY,
                is_public=bool(is_public),
            )
        else:
            setting = Setting(
                key=key,
                value=Setting.serialize(value),
                description=description if description else existing.description,
                category=category if category else existing.category,
                is_public=existing.is_public if is_public is None else bool(is_public),
            )

        self._settings.upsert(setting)
        logger.info("Setting %s updated", key)
        return setting

    def delete_setting(self, key: str) -> None:
        if not self._settings.delete(require_non_empty(key, "Key")):
            raise NotFoundError("Setting not found")
        logger.info("Setting %s deleted", key)
