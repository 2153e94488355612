"""Реакция приложения на изменение настроек."""

from __future__ import annotations

import logging
from typing import Protocol

from sftpmanager.utils.logger import resolve_log_level


class SettingsObserver(Protocol):
    def on_setting_changed(
        self, group: str, key: str, old_value: object, new_value: object
    ) -> None:
        ...


class LoggingSettingsObserver:
    """Журналирует изменения и сразу применяет новый уровень логирования."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def on_setting_changed(
        self, group: str, key: str, old_value: object, new_value: object
    ) -> None:
        self._logger.info("Setting changed: %s.%s (%r -> %r)", group, key, old_value, new_value)
        if (group, key) == ("logging", "level") and isinstance(new_value, str):
            logging.getLogger().setLevel(resolve_log_level(new_value))
