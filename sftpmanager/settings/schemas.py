"""Схема config.json, собранная из групп настроек."""

from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from sftpmanager.settings.groups import (
    LoggingSettings,
    RuntimeSettings,
    ServersSettings,
    SettingsGroup,
)

CONFIG_VERSION = "1.0.0"

GROUPS: Tuple[Type[SettingsGroup], ...] = (LoggingSettings, RuntimeSettings, ServersSettings)

# DEFAULT_CONFIG служит шаблоном для начального config.json
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": CONFIG_VERSION,
    **{
        group.group_name: {key: default for key, (default, _) in group.fields.items()}
        for group in GROUPS
    },
}
