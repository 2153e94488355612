"""Правила проверки значений config.json.

Каждое правило вызывается как функция и возвращает текст ошибки либо
None, если значение допустимо.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple

DOCKER_HOST_SCHEMES: Tuple[str, ...] = ("unix://", "tcp://", "ssh://", "npipe://")


class Validator(ABC):
    @abstractmethod
    def __call__(self, value: Any) -> Optional[str]:
        """Возвращает описание ошибки или None."""


@dataclass(frozen=True)
class OfType(Validator):
    """Тип значения; bool не принимается там, где ожидается int."""

    expected: type

    def __call__(self, value: Any) -> Optional[str]:
        if isinstance(value, bool) and self.expected is not bool:
            return f"expected {self.expected.__name__}, got bool"
        if not isinstance(value, self.expected):
            return f"expected {self.expected.__name__}, got {type(value).__name__}"
        return None


@dataclass(frozen=True)
class IntRange(Validator):
    low: int
    high: int

    def __call__(self, value: Any) -> Optional[str]:
        error = OfType(int)(value)
        if error:
            return error
        if not self.low <= value <= self.high:
            return f"{value} is outside {self.low}..{self.high}"
        return None


@dataclass(frozen=True)
class OneOf(Validator):
    choices: Tuple[Any, ...]

    def __call__(self, value: Any) -> Optional[str]:
        if value in self.choices:
            return None
        return f"{value!r} is not one of {', '.join(map(str, self.choices))}"


@dataclass(frozen=True)
class SingleToken(Validator):
    """Непустая строка без пробелов: имя или путь исполняемого файла."""

    def __call__(self, value: Any) -> Optional[str]:
        error = OfType(str)(value)
        if error:
            return error
        if not value or len(value.split()) != 1 or value != value.strip():
            return f"{value!r} must be a single word"
        return None


@dataclass(frozen=True)
class DockerHostUrl(Validator):
    """Пустая строка (окружение по умолчанию) либо адрес демона со схемой."""

    def __call__(self, value: Any) -> Optional[str]:
        error = OfType(str)(value)
        if error:
            return error
        if value and not value.startswith(DOCKER_HOST_SCHEMES):
            return f"{value!r} must start with one of {', '.join(DOCKER_HOST_SCHEMES)}"
        return None
