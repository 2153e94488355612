"""Модели данных сетевой подсистемы."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

ALL_INTERFACES_NAME = "All Interfaces"
ALL_INTERFACES_ADDRESS = "0.0.0.0"
LOOPBACK_ADDRESS = "127.0.0.1"


@dataclass(slots=True)
class NetworkInterface:
    """Локальный сетевой интерфейс с IPv4 адресом."""

    name: str
    address: str
    is_vpn: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "address": self.address, "is_vpn": self.is_vpn}


@dataclass(slots=True)
class NetworkConfig:
    """Сохранённое предпочтение: либо интерфейс, либо IP (не оба сразу)."""

    preferred_interface: Optional[str] = None
    preferred_ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Сериализует только заданные поля."""

        payload: Dict[str, Any] = {}
        if self.preferred_interface:
            payload["preferred_interface"] = self.preferred_interface
        if self.preferred_ip:
            payload["preferred_ip"] = self.preferred_ip
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        interface = data.get("preferred_interface")
        ip = data.get("preferred_ip")
        interface = interface if isinstance(interface, str) and interface else None
        ip = ip if isinstance(ip, str) and ip else None
        if interface and ip:
            # Повреждённый документ: IP считается более конкретным выбором
            interface = None
        return cls(preferred_interface=interface, preferred_ip=ip)


@dataclass(slots=True, frozen=True)
class BindingResolution:
    """Результат выбора адреса привязки."""

    address: str
    interface_name: Optional[str] = None
    is_vpn: bool = False


@dataclass(slots=True)
class NetworkInfo:
    """Текущее сетевое состояние для отображения пользователю."""

    current_ip: str
    current_interface: Optional[str] = None
    is_vpn: bool = False
    preferred_interface: Optional[str] = None
    preferred_ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_ip": self.current_ip,
            "current_interface": self.current_interface,
            "is_vpn": self.is_vpn,
            "preferred_interface": self.preferred_interface,
            "preferred_ip": self.preferred_ip,
        }
