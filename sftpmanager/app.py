"""Сборка приложения: рабочая директория, настройки, логирование, сервис."""

from __future__ import annotations

import logging
from pathlib import Path

from sftpmanager.docker_api.gateway import RuntimeGateway
from sftpmanager.docker_api.runner import CommandRunner, build_cli_env
from sftpmanager.network.interfaces import InterfaceEnumerator
from sftpmanager.servers.service import SftpServerService
from sftpmanager.settings.observers import LoggingSettingsObserver
from sftpmanager.settings.registry import SettingsRegistry
from sftpmanager.storage.credentials import CredentialStore
from sftpmanager.storage.preferences import NetworkPreferenceStore
from sftpmanager.utils.logger import configure_logging, get_logger
from sftpmanager.utils.paths import (
    CONFIG_FILE_NAME,
    CREDENTIALS_FILE_NAME,
    LOGS_DIR_NAME,
    NETWORK_FILE_NAME,
)

LOGGER = get_logger(__name__)


def initialize_workdir(base_dir: Path) -> bool:
    """Создаёт рабочую директорию и каталог логов."""

    try:
        base_dir.mkdir(parents=True, exist_ok=True)
        (base_dir / LOGS_DIR_NAME).mkdir(exist_ok=True)
        return True
    except OSError as exc:
        LOGGER.error("Cannot initialize working directory %s: %s", base_dir, exc)
        return False


def initialize_settings(config_path: Path) -> SettingsRegistry:
    """Получает singleton реестр настроек и загружает config.json."""

    registry = SettingsRegistry(config_path=config_path)
    registry.load_from_disk(config_path)
    registry.register_observer(LoggingSettingsObserver())
    return registry


def setup_logging_from_settings(base_dir: Path, settings: SettingsRegistry) -> None:
    """Настраивает логирование в соответствии с группой logging."""

    logging_settings = settings.get_group("logging")
    if not logging_settings.get("enabled"):
        logging.disable(logging.CRITICAL)
        return

    logging.disable(logging.NOTSET)
    configure_logging(
        log_dir=base_dir / LOGS_DIR_NAME,
        level_name=logging_settings.get("level"),
        max_bytes=logging_settings.get("max_file_size_mb") * 1024 * 1024,
        backup_count=logging_settings.get("max_archived_files"),
    )


def build_service(base_dir: Path, settings: SettingsRegistry) -> SftpServerService:
    """Связывает шлюз, перечислитель интерфейсов и хранилища в один сервис."""

    timeout = float(settings.get_value("runtime", "command_timeout_sec"))
    docker_runner = CommandRunner(
        timeout=timeout,
        env=build_cli_env(settings.get_value("runtime", "docker_host")),
    )
    gateway = RuntimeGateway(
        docker_runner,
        docker_binary=settings.get_value("runtime", "docker_binary"),
    )
    enumerator = InterfaceEnumerator(CommandRunner(timeout=timeout))
    return SftpServerService(
        gateway=gateway,
        enumerator=enumerator,
        credentials=CredentialStore(base_dir / CREDENTIALS_FILE_NAME),
        preferences=NetworkPreferenceStore(base_dir / NETWORK_FILE_NAME),
        settings=settings,
    )


def create_application(base_dir: Path) -> SftpServerService:
    """Готовит окружение и возвращает сервис управления серверами."""

    if not initialize_workdir(base_dir):
        raise OSError(f"Cannot initialize working directory {base_dir}")
    settings = initialize_settings(base_dir / CONFIG_FILE_NAME)
    setup_logging_from_settings(base_dir, settings)
    LOGGER.debug("Application initialized in %s", base_dir)
    return build_service(base_dir, settings)
