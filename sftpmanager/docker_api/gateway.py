"""Шлюз к docker CLI: единственная точка вызова команд рантайма.

Шлюз также отвечает на вопрос «наш ли это контейнер»: любая операция над
внешне переданным именем должна пройти через `ensure_managed`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from sftpmanager.docker_api import parsers
from sftpmanager.docker_api.exceptions import OwnershipDeniedError, RuntimeGatewayError
from sftpmanager.docker_api.models import ContainerSpec, ContainerSummary, FileEntry
from sftpmanager.docker_api.runner import Runner

LOGGER = logging.getLogger(__name__)

SFTP_IMAGE = "atmoz/sftp"


class RuntimeGateway:
    """Выполняет подкоманды docker и разбирает их вывод."""

    def __init__(
        self,
        runner: Runner,
        *,
        docker_binary: str = "docker",
    ) -> None:
        self._runner = runner
        self._docker = docker_binary
        self.image = SFTP_IMAGE

    # ------------------------------------------------------------------ checks
    def is_available(self) -> bool:
        """Проверяет, что docker CLI запускается."""

        try:
            self._runner.run([self._docker, "--version"])
            return True
        except RuntimeGatewayError:
            return False

    def is_image_managed(self, image_ref: str) -> bool:
        """Образ совпадает с управляемым точно или с указанием тега."""

        image_ref = image_ref.strip()
        return image_ref == self.image or image_ref.startswith(f"{self.image}:")

    def is_managed_container(self, name: str) -> bool:
        """True, только если контейнер существует и создан из управляемого образа."""

        try:
            image_ref = self._runner.run(
                [self._docker, "inspect", "--format", "{{.Config.Image}}", name]
            )
        except RuntimeGatewayError:
            return False
        return self.is_image_managed(image_ref)

    def ensure_managed(self, name: str) -> None:
        """Поднимает OwnershipDeniedError, если контейнер не наш."""

        if not self.is_managed_container(name):
            raise OwnershipDeniedError(name, self.image)

    # ----------------------------------------------------------------- queries
    def list_managed_containers(self) -> List[ContainerSummary]:
        """Возвращает все контейнеры управляемого образа одним вызовом `docker ps`."""

        output = self._runner.run(
            [
                self._docker,
                "ps",
                "-a",
                "--filter",
                f"ancestor={self.image}",
                "--format",
                parsers.PS_FORMAT,
            ]
        )
        return parsers.parse_ps_output(output)

    def published_ports(self, names: Sequence[str]) -> Dict[str, List[int]]:
        """Опубликованные порты хоста для каждого имени одним вызовом `docker inspect`."""

        if not names:
            return {}
        output = self._runner.run(
            [self._docker, "inspect", "--format", parsers.PORT_BINDINGS_FORMAT, *names]
        )
        return parsers.parse_port_bindings(output)

    def inspect_status(self, name: str) -> str:
        """Возвращает State.Status контейнера как есть (running, exited, ...)."""

        output = self._runner.run(
            [self._docker, "inspect", "--format", "{{.State.Status}}", name]
        )
        return output.strip()

    def fetch_logs(self, name: str, tail_lines: int = 50) -> str:
        output = self._runner.run(
            [self._docker, "logs", "--tail", str(tail_lines), name],
            merge_stderr=True,
        )
        return output

    def list_directory(self, name: str, path: str) -> List[FileEntry]:
        """Листинг директории внутри контейнера через `ls -la`."""

        output = self._runner.run([self._docker, "exec", name, "ls", "-la", "--", path])
        return parsers.parse_directory_listing(output, path)

    # --------------------------------------------------------------- mutations
    def create_container(self, spec: ContainerSpec) -> str:
        """Создаёт и запускает контейнер, возвращает короткий идентификатор."""

        output = self._runner.run(
            [
                self._docker,
                "run",
                "-d",
                "--name",
                spec.name,
                "-p",
                spec.port_mapping,
                "-v",
                spec.volume_mapping,
                "--restart",
                spec.restart_policy,
                self.image,
                spec.user_config,
            ],
            sensitive=[spec.password],
        )
        container_id = output.strip()[:12]
        LOGGER.info("Container %s created (%s) on %s", spec.name, container_id, spec.port_mapping)
        return container_id

    def start_container(self, name: str) -> None:
        self._runner.run([self._docker, "start", name])

    def stop_container(self, name: str) -> None:
        self._runner.run([self._docker, "stop", name])

    def remove_container(self, name: str, *, force: bool = True) -> None:
        command = [self._docker, "rm"]
        if force:
            command.append("-f")
        command.append(name)
        self._runner.run(command)
