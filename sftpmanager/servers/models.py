"""Модели данных для описания SFTP-серверов и результатов операций."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from sftpmanager.docker_api.exceptions import (
    CommandTimeoutError,
    OwnershipDeniedError,
    ProcessSpawnError,
)
from sftpmanager.storage.exceptions import PersistenceError


class ServerStatus(str, Enum):
    """Статусы сервера; NOT_CREATED и NOT_SFTP служат маркерами для get_status."""

    RUNNING = "running"
    STOPPED = "stopped"
    NOT_CREATED = "not created"
    NOT_SFTP = "not sftp"


class ErrorKind(str, Enum):
    """Классификация ошибок для программной обработки."""

    PROCESS_SPAWN = "process_spawn"
    RUNTIME_COMMAND = "runtime_command"
    TIMEOUT = "timeout"
    OWNERSHIP_DENIED = "ownership_denied"
    PERSISTENCE = "persistence"
    INVALID_REQUEST = "invalid_request"

    @classmethod
    def from_exception(cls, exc: Exception) -> "ErrorKind":
        if isinstance(exc, OwnershipDeniedError):
            return cls.OWNERSHIP_DENIED
        if isinstance(exc, ProcessSpawnError):
            return cls.PROCESS_SPAWN
        if isinstance(exc, CommandTimeoutError):
            return cls.TIMEOUT
        if isinstance(exc, PersistenceError):
            return cls.PERSISTENCE
        if isinstance(exc, ValueError):
            return cls.INVALID_REQUEST
        return cls.RUNTIME_COMMAND


@dataclass(slots=True)
class ManagedServer:
    """Сервер, собранный из данных рантайма и сохранённых учётных данных."""

    name: str
    port: int = 0
    host_path: str = ""
    container_path: str = ""
    username: str = ""
    password: str = ""
    status: ServerStatus = ServerStatus.STOPPED
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "port": self.port,
            "host_path": self.host_path,
            "container_path": self.container_path,
            "username": self.username,
            "password": self.password,
            "status": self.status.value,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class CreateServerRequest:
    """Входные данные для создания сервера; пустые поля заполняются по умолчанию."""

    name: str
    host_path: str
    username: str
    password: Optional[str] = None
    port: Optional[int] = None
    container_path: Optional[str] = None


@dataclass(slots=True)
class OperationResult:
    """Единый результат операции: успех либо текст ошибки с классом."""

    success: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind) -> "OperationResult":
        return cls(success=False, error=error, kind=kind)

    @classmethod
    def from_exception(cls, exc: Exception) -> "OperationResult":
        message = getattr(exc, "message", None) or str(exc)
        return cls.fail(message, ErrorKind.from_exception(exc))


@dataclass(slots=True)
class BulkOperationResult:
    """Итог массовой операции start/stop."""

    total: int = 0
    succeeded: int = 0
    failed: List[str] = field(default_factory=list)


class ConnectionFormat(str, Enum):
    FULL = "full"
    COMMAND = "command"
    URL = "url"
    PASSWORD = "password"


@dataclass(slots=True)
class ConnectionInfo:
    """Параметры подключения к серверу для клиента SFTP."""

    host: str
    port: int
    username: str
    password: str

    @property
    def command(self) -> str:
        return f"sftp -P {self.port} {self.username}@{self.host}"

    @property
    def url(self) -> str:
        return f"sftp://{self.username}:{self.password}@{self.host}:{self.port}"

    def format(self, fmt: ConnectionFormat = ConnectionFormat.FULL) -> str:
        if fmt is ConnectionFormat.COMMAND:
            return self.command
        if fmt is ConnectionFormat.URL:
            return self.url
        if fmt is ConnectionFormat.PASSWORD:
            return self.password
        return (
            f"Host: {self.host}\nPort: {self.port}\n"
            f"User: {self.username}\nPass: {self.password}"
        )


@dataclass(slots=True)
class SystemStatus:
    """Сводка окружения: docker, текущий адрес, директория конфигурации."""

    docker: bool
    ip: str
    config_dir: str
