"""Хранилище учётных данных серверов (sftp-servers.json)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sftpmanager.storage.json_store import JsonDocumentStore


@dataclass(slots=True)
class StoredCredentials:
    """Данные сервера, которые нельзя получить из рантайма."""

    username: str
    password: str
    host_path: str
    container_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "password": self.password,
            "host_path": self.host_path,
            "container_path": self.container_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredCredentials":
        return cls(
            username=str(data.get("username", "")),
            password=str(data.get("password", "")),
            host_path=str(data.get("host_path", "")),
            container_path=str(data.get("container_path", "")),
        )


class CredentialStore(JsonDocumentStore):
    """Отображение «имя сервера -> учётные данные»."""

    def load_all(self) -> Dict[str, StoredCredentials]:
        """Возвращает все записи; некорректные записи пропускаются."""

        loaded: Dict[str, StoredCredentials] = {}
        for name, entry in self.load_document().items():
            if isinstance(entry, dict):
                loaded[name] = StoredCredentials.from_dict(entry)
            else:
                self._logger.warning("Skipping malformed credentials entry %r", name)
        return loaded

    def get(self, name: str) -> Optional[StoredCredentials]:
        return self.load_all().get(name)

    def insert(self, name: str, credentials: StoredCredentials) -> None:
        """Добавляет или заменяет запись сервера."""

        def mutate(document: Dict[str, Any]) -> None:
            document[name] = credentials.to_dict()

        self.update(mutate)
        self._logger.info("Credentials stored for server %s", name)

    def delete(self, name: str) -> bool:
        """Удаляет запись; возвращает True, если она существовала."""

        def mutate(document: Dict[str, Any]) -> bool:
            return document.pop(name, None) is not None

        removed = self.update(mutate)
        if removed:
            self._logger.info("Credentials removed for server %s", name)
        return removed

    def prune(self, keep: Iterable[str]) -> List[str]:
        """Удаляет записи, имён которых нет в ``keep``; возвращает удалённые имена."""

        keep_names = set(keep)
        with self._lock:
            document = self.load_document()
            orphaned = sorted(name for name in document if name not in keep_names)
            if not orphaned:
                return []
            for name in orphaned:
                document.pop(name)
            self.save_document(document)
        self._logger.info("Pruned orphaned credentials: %s", ", ".join(orphaned))
        return orphaned
