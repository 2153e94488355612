"""Разбор текстового вывода docker CLI.

Все функции модуля чистые: получают сырой текст и возвращают структуры
данных. Нераспознанный ввод не приводит к исключениям, а превращается в
значение по умолчанию (порт 0, пропущенная строка и т.п.).
"""

from __future__ import annotations

import json
from typing import Dict, List, Optional

from sftpmanager.docker_api.models import ContainerSummary, FileEntry
from sftpmanager.utils.helpers import join_container_path

PS_SEPARATOR = "|"
PS_FORMAT = PS_SEPARATOR.join(["{{.Names}}", "{{.Status}}", "{{.Ports}}", "{{.CreatedAt}}"])

PORT_BINDINGS_FORMAT = PS_SEPARATOR.join(["{{.Name}}", "{{json .HostConfig.PortBindings}}"])

_NAME_FIELD_INDEX = 8


def parse_status(status_text: str) -> str:
    """Статус `docker ps` ("Up 5 minutes", "Exited (0) ...") -> running/stopped."""

    return "running" if "Up" in status_text else "stopped"


def parse_host_port(ports_text: str) -> int:
    """Извлекает порт хоста из "0.0.0.0:2222->22/tcp"; 0, если не удалось."""

    for mapping in ports_text.split(","):
        host_side, arrow, _ = mapping.strip().partition("->")
        if not arrow:
            continue
        _, colon, port_text = host_side.rpartition(":")
        if not colon or not port_text.isdigit():
            return 0
        port = int(port_text)
        return port if 0 < port <= 65535 else 0
    return 0


def parse_ps_line(line: str) -> Optional[ContainerSummary]:
    """Разбирает одну строку `docker ps --format PS_FORMAT`."""

    parts = line.split(PS_SEPARATOR)
    if len(parts) < 3 or not parts[0].strip():
        return None
    created_at = parts[3].strip() if len(parts) > 3 and parts[3].strip() else None
    return ContainerSummary(
        name=parts[0].strip(),
        status=parse_status(parts[1]),
        port=parse_host_port(parts[2]),
        created_at=created_at,
    )


def parse_ps_output(output: str) -> List[ContainerSummary]:
    """Разбирает весь вывод `docker ps`, пропуская некорректные строки."""

    summaries: List[ContainerSummary] = []
    for line in output.strip().splitlines():
        summary = parse_ps_line(line)
        if summary is not None:
            summaries.append(summary)
    return summaries


def parse_directory_listing(output: str, directory: str) -> List[FileEntry]:
    """Разбирает вывод `ls -la` и сортирует: сначала директории, затем по имени."""

    lines = output.splitlines()
    if lines and lines[0].startswith("total"):
        lines = lines[1:]

    entries: List[FileEntry] = []
    for line in lines:
        tokens = line.split()
        if len(tokens) <= _NAME_FIELD_INDEX:
            continue
        permissions = tokens[0]
        name = " ".join(tokens[_NAME_FIELD_INDEX:])
        if permissions.startswith("l"):
            name = name.split(" -> ", 1)[0]
        if name in (".", ".."):
            continue
        try:
            size = int(tokens[4])
        except ValueError:
            size = 0
        entries.append(
            FileEntry(
                name=name,
                path=join_container_path(directory, name),
                is_dir=permissions.startswith("d"),
                size=size,
            )
        )
    entries.sort(key=lambda entry: (not entry.is_dir, entry.name.lower()))
    return entries


def parse_port_bindings(output: str) -> Dict[str, List[int]]:
    """Разбирает `docker inspect --format PORT_BINDINGS_FORMAT`.

    Привязки берутся из конфигурации контейнера, поэтому порт остановленного
    сервера тоже виден. Имя приходит с ведущим "/".
    """

    published: Dict[str, List[int]] = {}
    for line in output.strip().splitlines():
        name, separator, payload = line.partition(PS_SEPARATOR)
        name = name.strip().lstrip("/")
        if not separator or not name:
            continue
        try:
            bindings = json.loads(payload)
        except ValueError:
            bindings = None
        ports: List[int] = []
        if isinstance(bindings, dict):
            for entries in bindings.values():
                for entry in entries or []:
                    port_text = str(entry.get("HostPort", "")) if isinstance(entry, dict) else ""
                    if port_text.isdigit() and 0 < int(port_text) <= 65535:
                        ports.append(int(port_text))
        published[name] = ports
    return published
