"""Исключения подсистемы настроек."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

LOGGER = logging.getLogger(__name__)


class SettingsError(Exception):
    """Сообщение строится из шаблона класса; контекст пишется в журнал."""

    template = "{reason}"

    def __init__(self, **context: Any) -> None:
        self.context = context
        self.message = self.template.format(**context)
        super().__init__(self.message)
        LOGGER.error("%s | context=%s", self.message, context)


class SettingsNotFoundError(SettingsError):
    template = "Setting '{name}' not found"

    def __init__(self, group: str, key: Optional[str] = None) -> None:
        self.group = group
        self.key = key
        super().__init__(name=f"{group}.{key}" if key else group)


class SettingsValidationError(SettingsError):
    template = "Validation error for '{key}': {reason} (value={value!r})"

    def __init__(self, key: str, value: Any, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(key=key, value=value, reason=reason)


class SettingsIOError(SettingsError):
    """Не удалось прочитать или записать config.json."""

    template = "Cannot access settings file '{path}': {reason}"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path=str(path), reason=reason)
