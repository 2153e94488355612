"""Исключения слоя взаимодействия с контейнерным рантаймом."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

LOGGER = logging.getLogger(__name__)


class RuntimeGatewayError(Exception):
    """Базовое исключение для ошибок внешних команд с поддержкой контекста."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ProcessSpawnError(RuntimeGatewayError):
    """Внешнюю команду не удалось запустить (нет бинарника, нет прав и т.п.)."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        self.command = list(command)
        super().__init__(reason, context={"command": self.command})
        LOGGER.debug("Cannot spawn %s: %s", " ".join(self.command), reason)


class RuntimeCommandError(RuntimeGatewayError):
    """Команда отработала с ненулевым кодом; stderr сохраняется как есть."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            stderr,
            context={"command": self.command, "returncode": returncode},
        )
        LOGGER.error(
            "Command %s exited with %s: %s",
            " ".join(self.command),
            returncode,
            stderr.strip(),
        )


class CommandTimeoutError(RuntimeGatewayError):
    """Команда не завершилась за отведённое время."""

    def __init__(self, command: Sequence[str], timeout: float) -> None:
        self.command = list(command)
        self.timeout = timeout
        super().__init__(
            f"Command timed out after {timeout:g} seconds: {' '.join(self.command)}",
            context={"command": self.command, "timeout": timeout},
        )
        LOGGER.error(self.message)


class OwnershipDeniedError(RuntimeGatewayError):
    """Контейнер не существует или создан не из управляемого образа."""

    def __init__(self, name: str, image: str) -> None:
        self.name = name
        self.image = image
        super().__init__(
            f"Not an SFTP container ({image})",
            context={"name": name, "image": image},
        )
        LOGGER.warning("Ownership check failed for container %r", name)
