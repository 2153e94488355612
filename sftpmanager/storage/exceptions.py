"""Исключения подсистемы хранения."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Поднимается при ошибках записи JSON-документа."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        self.message = f"I/O error with store file '{path}': {reason}"
        self.context = {"path": str(path), "reason": reason}
        super().__init__(self.message)
        LOGGER.error("%s | context=%s", self.message, self.context)
