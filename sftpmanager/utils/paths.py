"""Централизованное описание путей приложения."""

from __future__ import annotations

import os
import sys
from pathlib import Path

APP_DIR_NAME = "sftp-manager"
CONFIG_FILE_NAME = "config.json"
CREDENTIALS_FILE_NAME = "sftp-servers.json"
NETWORK_FILE_NAME = "network.json"
LOGS_DIR_NAME = "logs"


def resolve_config_dir() -> Path:
    """Возвращает пользовательскую директорию конфигурации.

    Переменная окружения ``SFTPM_HOME`` имеет приоритет над системной
    директорией конфигурации текущей платформы.
    """

    override = os.environ.get("SFTPM_HOME")
    if override:
        return Path(override).expanduser()
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / APP_DIR_NAME


# CONFIG_DIR: базовая директория, где сохраняются настройки, учётные данные и логи
CONFIG_DIR = resolve_config_dir()
