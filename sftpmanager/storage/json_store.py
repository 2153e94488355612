"""Базовый класс для JSON-документа с сериализованным доступом."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, TypeVar

from sftpmanager.storage.exceptions import PersistenceError

T = TypeVar("T")


class JsonDocumentStore:
    """Хранит один JSON-объект на диске.

    Чтение никогда не падает: отсутствующий или повреждённый файл
    трактуется как пустой документ. Запись атомарна (временный файл и
    os.replace) и поднимает PersistenceError. Все циклы
    «прочитать-изменить-записать» выполняются под одной блокировкой.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._logger = logging.getLogger(self.__class__.__module__)

    @property
    def file_path(self) -> Path:
        return self._file_path

    # ------------------------------------------------------------- persistence --
    def load_document(self) -> Dict[str, Any]:
        """Загружает документ; при ошибке возвращает пустой словарь."""

        with self._lock:
            if not self._file_path.exists():
                return {}
            try:
                content = json.loads(self._file_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                self._logger.warning(
                    "Store file %s is unreadable, treating as empty: %s", self._file_path, exc
                )
                return {}
            if not isinstance(content, dict):
                self._logger.warning(
                    "Store file %s does not contain an object, treating as empty",
                    self._file_path,
                )
                return {}
            return content

    def save_document(self, payload: Dict[str, Any]) -> None:
        """Атомарно перезаписывает документ целиком."""

        with self._lock:
            tmp_path = self._file_path.with_name(f"{self._file_path.name}.tmp")
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(
                    json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
                )
                os.replace(tmp_path, self._file_path)
            except OSError as exc:
                raise PersistenceError(self._file_path, str(exc)) from exc

    def update(self, mutator: Callable[[Dict[str, Any]], T]) -> T:
        """Выполняет загрузку, изменение и сохранение как одну операцию."""

        with self._lock:
            document = self.load_document()
            result = mutator(document)
            self.save_document(document)
            return result
