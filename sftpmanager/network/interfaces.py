"""Перечисление локальных сетевых интерфейсов через системные утилиты.

Используются `ip -o -4 addr show` (Linux, при его отсутствии `ifconfig`),
`ifconfig` (macOS и прочие Unix) и `ipconfig` (Windows). Результат не
кэшируется: каждый вызов заново опрашивает систему. Нераспознанный вывод
даёт пустой список без ошибок.
"""

from __future__ import annotations

import logging
import platform
import re
from typing import List, Optional, Sequence, Tuple

from sftpmanager.docker_api.exceptions import ProcessSpawnError, RuntimeGatewayError
from sftpmanager.docker_api.runner import Runner
from sftpmanager.network.models import (
    ALL_INTERFACES_ADDRESS,
    ALL_INTERFACES_NAME,
    NetworkInterface,
)

LOGGER = logging.getLogger(__name__)

# Подстроки имён интерфейсов туннелей и VPN-клиентов
VPN_MARKERS: Tuple[str, ...] = (
    "tun",
    "tap",
    "wg",
    "wireguard",
    "tailscale",
    "zerotier",
    "vpn",
    "hamachi",
    "radmin",
)

_IPV4_PATTERN = re.compile(r"\b(\d{1,3}(?:\.\d{1,3}){3})\b")

InterfacePair = Tuple[str, str]


def is_vpn_interface(name: str) -> bool:
    """Классифицирует интерфейс как туннельный по подстроке в имени."""

    lowered = name.lower()
    return any(marker in lowered for marker in VPN_MARKERS)


def parse_ip_addr_output(output: str) -> List[InterfacePair]:
    """Разбирает `ip -o -4 addr show`.

    Пример строки: ``2: eth0    inet 192.168.1.10/24 brd ... scope global eth0``.
    """

    pairs: List[InterfacePair] = []
    for line in output.splitlines():
        tokens = line.split()
        if len(tokens) < 4 or "inet" not in tokens:
            continue
        name = tokens[1].rstrip(":").split("@", 1)[0]
        inet_index = tokens.index("inet")
        if inet_index + 1 >= len(tokens):
            continue
        address = tokens[inet_index + 1].split("/", 1)[0]
        if _IPV4_PATTERN.fullmatch(address):
            pairs.append((name, address))
    return pairs


def parse_ifconfig_output(output: str) -> List[InterfacePair]:
    """Разбирает `ifconfig`: заголовок блока ``en0: flags=...``, строки ``inet``."""

    pairs: List[InterfacePair] = []
    current: Optional[str] = None
    for line in output.splitlines():
        if not line.strip():
            continue
        if not line[0].isspace():
            current = line.split(":", 1)[0].split()[0]
            continue
        stripped = line.strip()
        if current is None or not stripped.startswith("inet "):
            continue
        value = stripped.split()[1]
        if value.startswith("addr:"):
            value = value[len("addr:") :]
        match = _IPV4_PATTERN.fullmatch(value)
        if match:
            pairs.append((current, match.group(1)))
    return pairs


def parse_ipconfig_output(output: str) -> List[InterfacePair]:
    """Разбирает `ipconfig` (Windows, англоязычная локаль)."""

    pairs: List[InterfacePair] = []
    current: Optional[str] = None
    for line in output.splitlines():
        if not line.strip():
            continue
        if not line[0].isspace():
            header = line.strip().rstrip(":")
            _, marker, adapter = header.partition(" adapter ")
            current = adapter.strip() if marker else None
            continue
        if current is None or "IPv4" not in line or ":" not in line:
            continue
        match = _IPV4_PATTERN.search(line.split(":", 1)[1])
        if match:
            pairs.append((current, match.group(1)))
    return pairs


_IP_COMMAND = (["ip", "-o", "-4", "addr", "show"], parse_ip_addr_output)
_IFCONFIG_COMMAND = (["ifconfig"], parse_ifconfig_output)
_IPCONFIG_COMMAND = (["ipconfig"], parse_ipconfig_output)

# Утилиты в порядке предпочтения; следующая используется, если предыдущей нет
_PLATFORM_COMMANDS = {
    "Linux": (_IP_COMMAND, _IFCONFIG_COMMAND),
    "Windows": (_IPCONFIG_COMMAND,),
}
_DEFAULT_COMMANDS = (_IFCONFIG_COMMAND,)


class InterfaceEnumerator:
    """Возвращает список интерфейсов, всегда начиная с «All Interfaces»."""

    def __init__(self, runner: Runner, *, system: Optional[str] = None) -> None:
        self._runner = runner
        self._system = system or platform.system()

    def list_interfaces(self) -> List[NetworkInterface]:
        interfaces = [
            NetworkInterface(name=ALL_INTERFACES_NAME, address=ALL_INTERFACES_ADDRESS, is_vpn=False)
        ]
        for name, address in self.discover():
            interfaces.append(
                NetworkInterface(name=name, address=address, is_vpn=is_vpn_interface(name))
            )
        return interfaces

    def discover(self) -> List[InterfacePair]:
        """Опрашивает системную утилиту; loopback и пустые адреса отбрасываются."""

        for command, parser in _PLATFORM_COMMANDS.get(self._system, _DEFAULT_COMMANDS):
            try:
                output = self._runner.run(command)
            except ProcessSpawnError:
                LOGGER.debug("%s is not available, trying the next utility", command[0])
                continue
            except RuntimeGatewayError as exc:
                LOGGER.debug("Interface enumeration via %s failed: %s", command[0], exc)
                return []
            return filter_addresses(parser(output))
        return []


def filter_addresses(pairs: Sequence[InterfacePair]) -> List[InterfacePair]:
    """Убирает loopback (127.*) и записи без адреса."""

    return [
        (name, address)
        for name, address in pairs
        if address and not address.startswith("127.")
    ]
