"""Группы настроек: значения по умолчанию и правила проверки каждого ключа."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional, Tuple

from sftpmanager.settings.exceptions import SettingsNotFoundError, SettingsValidationError
from sftpmanager.settings.validators import (
    DockerHostUrl,
    IntRange,
    OfType,
    OneOf,
    SingleToken,
    Validator,
)

RESTART_POLICIES = ("no", "always", "unless-stopped", "on-failure")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

Field = Tuple[Any, Validator]


class SettingsGroup:
    """Набор ключей одной секции config.json.

    Подклассы описывают ``fields``: ключ -> (значение по умолчанию, правило).
    """

    group_name: ClassVar[str] = ""
    fields: ClassVar[Dict[str, Field]] = {}

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self.reset_to_defaults()

    def keys(self) -> Tuple[str, ...]:
        return tuple(self.fields)

    def _field(self, key: str) -> Field:
        try:
            return self.fields[key]
        except KeyError:
            raise SettingsNotFoundError(self.group_name, key) from None

    def get(self, key: str) -> Any:
        self._field(key)
        return self._values[key]

    def validate(self, key: str, value: Any) -> Optional[str]:
        """Текст ошибки для значения ключа или None."""

        _, rule = self._field(key)
        return rule(value)

    def set(self, key: str, value: Any) -> None:
        error = self.validate(key, value)
        if error:
            raise SettingsValidationError(f"{self.group_name}.{key}", value, error)
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Применяет известные ключи; прочие (в том числе устаревшие) пропускаются."""

        for key, value in data.items():
            if key in self.fields:
                self.set(key, value)

    def reset_to_defaults(self) -> None:
        self._values = {key: default for key, (default, _) in self.fields.items()}


class LoggingSettings(SettingsGroup):
    group_name = "logging"
    fields = {
        "enabled": (True, OfType(bool)),
        "level": ("INFO", OneOf(LOG_LEVELS)),
        "max_file_size_mb": (10, IntRange(1, 1000)),
        "max_archived_files": (5, IntRange(1, 50)),
    }


class RuntimeSettings(SettingsGroup):
    """Как вызывать docker CLI. Образ SFTP не настраивается."""

    group_name = "runtime"
    fields = {
        "docker_binary": ("docker", SingleToken()),
        "docker_host": ("", DockerHostUrl()),
        "command_timeout_sec": (30, IntRange(1, 600)),
    }


class ServersSettings(SettingsGroup):
    """Значения по умолчанию для создаваемых серверов."""

    group_name = "servers"
    fields = {
        "default_port": (2222, IntRange(1, 65535)),
        "default_uid": (1001, IntRange(1, 65535)),
        "password_length": (16, IntRange(8, 128)),
        "logs_tail_lines": (50, IntRange(1, 10000)),
        "restart_policy": ("unless-stopped", OneOf(RESTART_POLICIES)),
        "prune_orphaned_credentials": (True, OfType(bool)),
    }
