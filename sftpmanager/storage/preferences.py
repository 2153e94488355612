"""Хранилище сетевого предпочтения (network.json)."""

from __future__ import annotations

from typing import Any, Dict

from sftpmanager.network.models import NetworkConfig
from sftpmanager.storage.json_store import JsonDocumentStore


class NetworkPreferenceStore(JsonDocumentStore):
    """Хранит либо предпочтительный интерфейс, либо предпочтительный IP."""

    def load(self) -> NetworkConfig:
        return NetworkConfig.from_dict(self.load_document())

    def set_preferred_ip(self, ip: str) -> NetworkConfig:
        """Сохраняет IP и сбрасывает интерфейс."""

        config = NetworkConfig(preferred_ip=ip)
        self._replace(config.to_dict())
        self._logger.info("Preferred bind address set to %s", ip)
        return config

    def set_preferred_interface(self, interface_name: str) -> NetworkConfig:
        """Сохраняет имя интерфейса и сбрасывает IP."""

        config = NetworkConfig(preferred_interface=interface_name)
        self._replace(config.to_dict())
        self._logger.info("Preferred interface set to %s", interface_name)
        return config

    def clear(self) -> NetworkConfig:
        self._replace({})
        self._logger.info("Network preference cleared")
        return NetworkConfig()

    def _replace(self, payload: Dict[str, Any]) -> None:
        def mutate(document: Dict[str, Any]) -> None:
            document.clear()
            document.update(payload)

        self.update(mutate)
