"""Упрощённые структуры данных для описания объектов рантайма."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True)
class ContainerSummary:
    """Строка из пакетного списка управляемых контейнеров."""

    name: str
    status: str  # running или stopped
    port: int = 0  # порт на хосте, 0 если не распознан
    created_at: Optional[str] = None


@dataclass(slots=True)
class FileEntry:
    """Элемент листинга директории внутри контейнера."""

    name: str
    path: str
    is_dir: bool
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Сериализует модель в dict."""

        return {
            "name": self.name,
            "path": self.path,
            "is_dir": self.is_dir,
            "size": self.size,
        }


@dataclass(slots=True)
class ContainerSpec:
    """Параметры `docker run` для нового SFTP-контейнера."""

    name: str
    port: int
    host_path: str
    container_path: str
    username: str
    password: str
    uid: int = 1001
    bind_address: str = "0.0.0.0"
    restart_policy: str = "unless-stopped"

    @property
    def port_mapping(self) -> str:
        return f"{self.bind_address}:{self.port}:22"

    @property
    def volume_mapping(self) -> str:
        return f"{self.host_path}:{self.container_path}"

    @property
    def user_config(self) -> str:
        return f"{self.username}:{self.password}:{self.uid}"
