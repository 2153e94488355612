"""Запуск внешних команд с таймаутом и классификацией ошибок."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Dict, List, Optional, Protocol, Sequence

from sftpmanager.docker_api.exceptions import (
    CommandTimeoutError,
    ProcessSpawnError,
    RuntimeCommandError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 30.0
REDACTED = "***"


class Runner(Protocol):
    """Контракт исполнителя: возвращает stdout или поднимает RuntimeGatewayError."""

    def run(
        self,
        command: Sequence[str],
        *,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
        sensitive: Sequence[str] = (),
    ) -> str:  # pragma: no cover - протокол
        ...


class CommandRunner:
    """Синхронно выполняет команды через subprocess.run."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        env: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self._env = env

    def run(
        self,
        command: Sequence[str],
        *,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
        sensitive: Sequence[str] = (),
    ) -> str:
        """Выполняет команду и возвращает её stdout.

        ``merge_stderr`` склеивает stderr со stdout (нужно для `docker logs`),
        значения из ``sensitive`` маскируются в журнале и в исключениях.
        """

        args: List[str] = list(command)
        shown = redact_command(args, sensitive)
        effective_timeout = timeout if timeout is not None else self.timeout
        LOGGER.debug("Running %s (timeout=%s)", " ".join(shown), effective_timeout)
        try:
            completed = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=effective_timeout,
                env=self._env,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(shown, effective_timeout) from exc
        except OSError as exc:
            raise ProcessSpawnError(shown, str(exc)) from exc
        if completed.returncode != 0:
            error_text = completed.stdout if merge_stderr else completed.stderr
            raise RuntimeCommandError(shown, completed.returncode, error_text or "")
        return completed.stdout or ""


def redact_command(command: Sequence[str], sensitive: Sequence[str]) -> List[str]:
    """Заменяет секреты в аргументах команды на маску."""

    secrets = [value for value in sensitive if value]
    if not secrets:
        return list(command)
    redacted: List[str] = []
    for arg in command:
        for value in secrets:
            arg = arg.replace(value, REDACTED)
        redacted.append(arg)
    return redacted


def build_cli_env(docker_host: str = "") -> Dict[str, str]:
    """Формирует окружение для docker CLI с учётом DOCKER_HOST."""

    env = os.environ.copy()
    host = docker_host.strip()
    if host:
        env["DOCKER_HOST"] = host
    return env
