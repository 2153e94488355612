"""Выбор адреса привязки по списку интерфейсов и сохранённому предпочтению."""

from __future__ import annotations

from typing import Sequence

from sftpmanager.network.models import (
    LOOPBACK_ADDRESS,
    BindingResolution,
    NetworkConfig,
    NetworkInterface,
)


def resolve_binding(
    interfaces: Sequence[NetworkInterface],
    config: NetworkConfig,
) -> BindingResolution:
    """Возвращает ровно один адрес привязки.

    Порядок: предпочтительный IP, предпочтительный интерфейс, первый не-VPN
    интерфейс, первый любой интерфейс, loopback.
    """

    if config.preferred_ip:
        for interface in interfaces:
            if interface.address == config.preferred_ip:
                return _from_interface(interface)

    if config.preferred_interface:
        for interface in interfaces:
            if interface.name == config.preferred_interface:
                return _from_interface(interface)

    for interface in interfaces:
        if not interface.is_vpn:
            return _from_interface(interface)

    if interfaces:
        return _from_interface(interfaces[0])

    return BindingResolution(address=LOOPBACK_ADDRESS, interface_name=None, is_vpn=False)


def _from_interface(interface: NetworkInterface) -> BindingResolution:
    return BindingResolution(
        address=interface.address,
        interface_name=interface.name,
        is_vpn=interface.is_vpn,
    )
