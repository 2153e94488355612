"""Реестр настроек приложения (Singleton)."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sftpmanager.settings.exceptions import (
    SettingsIOError,
    SettingsNotFoundError,
    SettingsValidationError,
)
from sftpmanager.settings.groups import SettingsGroup
from sftpmanager.settings.observers import SettingsObserver
from sftpmanager.settings.schemas import DEFAULT_CONFIG, GROUPS
from sftpmanager.utils.paths import CONFIG_DIR, CONFIG_FILE_NAME


class SettingsRegistry:
    """Единственный экземпляр на процесс; хранит группы logging, runtime, servers.

    Ключи верхнего уровня, не являющиеся группами (например ``version``),
    сохраняются как есть при перезаписи файла.
    """

    _instance: Optional["SettingsRegistry"] = None

    def __new__(cls, config_path: Optional[Path] = None) -> "SettingsRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if getattr(self, "_initialized", False):
            if config_path is not None:
                self._file_path = config_path
            return

        self._logger = logging.getLogger(__name__)
        self._file_path = config_path or CONFIG_DIR / CONFIG_FILE_NAME
        self._groups: Dict[str, SettingsGroup] = {group.group_name: group() for group in GROUPS}
        self._observers: List[SettingsObserver] = []
        self._extra: Dict[str, Any] = self._non_group_keys(DEFAULT_CONFIG)
        self._initialized = True

    @property
    def config_path(self) -> Path:
        return self._file_path

    # --------------------------------------------------------------------- API
    def get_value(self, group: str, key: str, default: Any = None) -> Any:
        try:
            return self.get_group(group).get(key)
        except SettingsNotFoundError:
            if default is not None:
                return default
            raise

    def set_value(self, group: str, key: str, value: Any) -> None:
        """Проверяет и сохраняет значение в памяти, затем уведомляет наблюдателей."""

        settings_group = self.get_group(group)
        old_value = settings_group.get(key)
        settings_group.set(key, value)
        if old_value != value:
            self._notify(group, key, old_value, value)

    def get_group(self, group: str) -> SettingsGroup:
        try:
            return self._groups[group]
        except KeyError:
            raise SettingsNotFoundError(group) from None

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return {name: group.to_dict() for name, group in self._groups.items()}

    def register_observer(self, observer: SettingsObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def _notify(self, group: str, key: str, old_value: Any, new_value: Any) -> None:
        for observer in list(self._observers):
            try:
                observer.on_setting_changed(group, key, old_value, new_value)
            except Exception as exc:  # pragma: no cover
                self._logger.error("Observer %s failed: %s", observer, exc, exc_info=True)

    # ------------------------------------------------------------------- disk
    def save_to_disk(self, path: Optional[Path] = None) -> None:
        target = path or self._file_path
        payload = {**self._extra, **self.snapshot()}
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise SettingsIOError(target, str(exc)) from exc

    def load_from_disk(self, path: Optional[Path] = None) -> None:
        """Читает config.json поверх значений по умолчанию.

        Отсутствующий файл создаётся. Повреждённый JSON, не-объект на верхнем
        уровне и недопустимые значения приводят к исключению.
        """

        target = path or self._file_path
        if not target.exists():
            self._logger.info("Config file %s not found, writing defaults.", target)
            self.save_to_disk(target)
            return
        try:
            content = json.loads(target.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SettingsIOError(target, str(exc)) from exc
        if not isinstance(content, dict):
            raise SettingsIOError(target, "top-level JSON value must be an object")

        merged = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in content.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value
        self._extra = self._non_group_keys(merged)
        for name, group in self._groups.items():
            if isinstance(merged.get(name), dict):
                group.from_dict(merged[name])
        self.validate()

    def validate(self) -> bool:
        for name, group in self._groups.items():
            for key in group.keys():
                value = group.get(key)
                error = group.validate(key, value)
                if error:
                    raise SettingsValidationError(f"{name}.{key}", value, error)
        return True

    def reset_to_defaults(self) -> None:
        for group in self._groups.values():
            group.reset_to_defaults()

    def _non_group_keys(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in data.items() if key not in self._groups}
