"""Различные вспомогательные функции."""

from __future__ import annotations

import re
import secrets
import string

_PASSWORD_ALPHABET = string.ascii_letters + string.digits
# Допустимые имена контейнеров docker: [a-zA-Z0-9][a-zA-Z0-9_.-]+
_CONTAINER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")


def normalize_host_path(raw_value: str) -> str:
    """Приводит путь хоста к виду с прямыми слешами (C:\\data -> C:/data)."""

    return raw_value.strip().replace("\\", "/")


def generate_password(length: int = 16) -> str:
    """Генерирует случайный буквенно-цифровой пароль."""

    if length <= 0:
        raise ValueError("Password length must be positive")
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def is_valid_container_name(name: str) -> bool:
    """Проверяет, что имя подходит для контейнера docker."""

    return bool(_CONTAINER_NAME_PATTERN.fullmatch(name))


def join_container_path(directory: str, name: str) -> str:
    """Склеивает путь внутри контейнера без дублирования разделителя."""

    if directory.endswith("/"):
        return f"{directory}{name}"
    return f"{directory}/{name}"
