"""Управление жизненным циклом SFTP-серверов.

Сервис объединяет `RuntimeGateway`, хранилища учётных данных и сетевых
предпочтений и перечислитель интерфейсов. Он не хранит собственного
состояния: каждый запрос заново опрашивает рантайм. Любая ошибка
перехватывается на границе операции и превращается в `OperationResult`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from sftpmanager.docker_api.exceptions import OwnershipDeniedError, RuntimeGatewayError
from sftpmanager.docker_api.gateway import RuntimeGateway
from sftpmanager.docker_api.models import ContainerSpec, ContainerSummary
from sftpmanager.network.interfaces import InterfaceEnumerator
from sftpmanager.network.models import (
    ALL_INTERFACES_ADDRESS,
    LOOPBACK_ADDRESS,
    BindingResolution,
    NetworkInfo,
    NetworkInterface,
)
from sftpmanager.network.resolver import resolve_binding
from sftpmanager.servers.models import (
    BulkOperationResult,
    ConnectionFormat,
    ConnectionInfo,
    CreateServerRequest,
    ErrorKind,
    ManagedServer,
    OperationResult,
    ServerStatus,
    SystemStatus,
)
from sftpmanager.storage.credentials import CredentialStore, StoredCredentials
from sftpmanager.storage.exceptions import PersistenceError
from sftpmanager.storage.preferences import NetworkPreferenceStore
from sftpmanager.utils.helpers import (
    generate_password,
    is_valid_container_name,
    normalize_host_path,
)

LOGGER = logging.getLogger(__name__)


class SettingsReader(Protocol):
    """Минимальный интерфейс чтения настроек."""

    def get_value(self, group: str, key: str, default: Any = None) -> Any:  # pragma: no cover
        ...


class SftpServerService:
    """Высокоуровневый API для работы с SFTP-серверами."""

    def __init__(
        self,
        gateway: RuntimeGateway,
        enumerator: InterfaceEnumerator,
        credentials: CredentialStore,
        preferences: NetworkPreferenceStore,
        settings: SettingsReader,
    ) -> None:
        self._gateway = gateway
        self._enumerator = enumerator
        self._credentials = credentials
        self._preferences = preferences
        self._settings = settings

    # ------------------------------------------------------------------ helpers
    def _setting(self, key: str, default: Any) -> Any:
        return self._settings.get_value("servers", key, default=default)

    def _gated(self, name: str, action: Callable[[str], None], verb: str) -> OperationResult:
        """Выполняет действие только над управляемым контейнером."""

        try:
            self._gateway.ensure_managed(name)
            action(name)
        except RuntimeGatewayError as exc:
            if not isinstance(exc, OwnershipDeniedError):
                LOGGER.error("Cannot %s server %s: %s", verb, name, exc.message.strip())
            return OperationResult.from_exception(exc)
        LOGGER.info("Server %s: %s done", name, verb)
        return OperationResult.ok()

    def _list_containers(self) -> Optional[List[ContainerSummary]]:
        try:
            return self._gateway.list_managed_containers()
        except RuntimeGatewayError as exc:
            LOGGER.error("Cannot list managed containers: %s", exc.message.strip())
            return None

    # ------------------------------------------------------------------ runtime
    def check_runtime_available(self) -> bool:
        return self._gateway.is_available()

    def get_system_status(self) -> SystemStatus:
        return SystemStatus(
            docker=self.check_runtime_available(),
            ip=self.get_local_address(),
            config_dir=str(self._credentials.file_path.parent),
        )

    # ------------------------------------------------------------------ servers
    def list_servers(self) -> List[ManagedServer]:
        """Объединяет список контейнеров рантайма с сохранёнными учётными данными.

        Контейнеры без учётных данных попадают в список с пустыми полями.
        После успешного опроса рантайма удаляются записи, для которых
        `docker inspect` не находит управляемого контейнера (настройка
        ``servers.prune_orphaned_credentials``).
        """

        summaries = self._list_containers()
        if summaries is None:
            return []
        stored = self._credentials.load_all()
        if self._setting("prune_orphaned_credentials", True):
            stored = self._prune_orphaned(stored, summaries)

        servers: List[ManagedServer] = []
        for summary in summaries:
            creds = stored.get(summary.name)
            servers.append(
                ManagedServer(
                    name=summary.name,
                    port=summary.port,
                    host_path=creds.host_path if creds else "",
                    container_path=creds.container_path if creds else "",
                    username=creds.username if creds else "",
                    password=creds.password if creds else "",
                    status=ServerStatus(summary.status),
                    created_at=summary.created_at,
                )
            )
        return servers

    def _prune_orphaned(
        self, stored: Dict[str, StoredCredentials], summaries: List[ContainerSummary]
    ) -> Dict[str, StoredCredentials]:
        """Удаляет записи, для которых рантайм не подтверждает управляемый контейнер.

        Отсутствия имени в пакетном списке недостаточно: туда не попадают
        контейнеры с тегом образа и контейнеры старой версии образа после pull.
        """

        listed = {summary.name for summary in summaries}
        orphaned = [
            name
            for name in stored
            if name not in listed and not self._gateway.is_managed_container(name)
        ]
        if not orphaned:
            return stored
        try:
            self._credentials.prune(name for name in stored if name not in orphaned)
        except PersistenceError as exc:
            LOGGER.warning("Credential reconciliation skipped: %s", exc.reason)
            return stored
        return {name: creds for name, creds in stored.items() if name not in orphaned}

    def get_server(self, name: str) -> Optional[ManagedServer]:
        for server in self.list_servers():
            if server.name == name:
                return server
        return None

    def find_available_port(self) -> int:
        """Первый порт, начиная с servers.default_port, не занятый нашими серверами.

        Порты остановленных серверов берутся из их конфигурации.
        """

        summaries = self._list_containers() or []
        used = {summary.port for summary in summaries}
        try:
            published = self._gateway.published_ports([summary.name for summary in summaries])
        except RuntimeGatewayError as exc:
            LOGGER.warning("Cannot read port bindings: %s", exc.message.strip())
            published = {}
        for ports in published.values():
            used.update(ports)
        port = int(self._setting("default_port", 2222))
        while port in used:
            port += 1
        return port

    def create_server(self, request: CreateServerRequest) -> OperationResult:
        """Создаёт контейнер и сохраняет учётные данные.

        При ошибке сохранения учётных данных контейнер удаляется, чтобы
        рантайм и хранилище не расходились.
        """

        error = self._validate_request(request)
        if error:
            return OperationResult.fail(error, ErrorKind.INVALID_REQUEST)

        password = request.password or generate_password(
            int(self._setting("password_length", 16))
        )
        port = request.port or self.find_available_port()
        container_path = request.container_path or f"/home/{request.username}/files"
        binding = self.resolve_binding()

        spec = ContainerSpec(
            name=request.name,
            port=port,
            host_path=normalize_host_path(request.host_path),
            container_path=container_path,
            username=request.username,
            password=password,
            uid=int(self._setting("default_uid", 1001)),
            bind_address=binding.address,
            restart_policy=str(self._setting("restart_policy", "unless-stopped")),
        )
        try:
            self._gateway.create_container(spec)
        except RuntimeGatewayError as exc:
            LOGGER.error("Cannot create server %s: %s", request.name, exc.message.strip())
            return OperationResult.from_exception(exc)

        credentials = StoredCredentials(
            username=request.username,
            password=password,
            host_path=request.host_path,
            container_path=container_path,
        )
        try:
            self._credentials.insert(request.name, credentials)
        except PersistenceError as exc:
            self._rollback_create(request.name)
            return OperationResult.from_exception(exc)

        server = ManagedServer(
            name=request.name,
            port=port,
            host_path=request.host_path,
            container_path=container_path,
            username=request.username,
            password=password,
            status=ServerStatus.RUNNING,
        )
        LOGGER.info("Server %s created on %s:%s", request.name, binding.address, port)
        return OperationResult.ok(server)

    def _rollback_create(self, name: str) -> None:
        try:
            self._gateway.remove_container(name, force=True)
            LOGGER.warning("Container %s removed after credential write failure", name)
        except RuntimeGatewayError as exc:
            LOGGER.error("Rollback of container %s failed: %s", name, exc.message.strip())

    @staticmethod
    def _validate_request(request: CreateServerRequest) -> Optional[str]:
        if not is_valid_container_name(request.name):
            return f"Invalid server name: {request.name!r}"
        if not request.username or ":" in request.username:
            return "Username must be non-empty and must not contain ':'"
        if request.password and ":" in request.password:
            return "Password must not contain ':'"
        if not request.host_path.strip():
            return "Host path must not be empty"
        if request.port is not None and not 0 < request.port <= 65535:
            return f"Port out of range: {request.port}"
        return None

    def start_server(self, name: str) -> OperationResult:
        return self._gated(name, self._gateway.start_container, "start")

    def stop_server(self, name: str) -> OperationResult:
        return self._gated(name, self._gateway.stop_container, "stop")

    def remove_server(self, name: str) -> OperationResult:
        """Удаляет контейнер, затем учётные данные.

        Если рантайм не смог удалить контейнер, учётные данные остаются.
        """

        result = self._gated(
            name,
            lambda target: self._gateway.remove_container(target, force=True),
            "remove",
        )
        if not result.success:
            return result
        try:
            self._credentials.delete(name)
        except PersistenceError as exc:
            LOGGER.warning(
                "Server %s removed but its credentials remain: %s", name, exc.reason
            )
        return result

    def start_all_servers(self) -> BulkOperationResult:
        return self._bulk(self.start_server)

    def stop_all_servers(self) -> BulkOperationResult:
        return self._bulk(self.stop_server)

    def _bulk(self, operation: Callable[[str], OperationResult]) -> BulkOperationResult:
        summaries = self._list_containers() or []
        result = BulkOperationResult(total=len(summaries))
        for summary in summaries:
            if operation(summary.name).success:
                result.succeeded += 1
            else:
                result.failed.append(summary.name)
        return result

    def get_status(self, name: str) -> str:
        """Статус рантайма как есть, либо маркеры "not sftp" / "not created"."""

        if not self._gateway.is_managed_container(name):
            return ServerStatus.NOT_SFTP.value
        try:
            return self._gateway.inspect_status(name)
        except RuntimeGatewayError:
            return ServerStatus.NOT_CREATED.value

    def get_logs(self, name: str, tail_lines: Optional[int] = None) -> str:
        """Последние строки лога либо текст ошибки."""

        lines = tail_lines
        if lines is None:
            lines = int(self._setting("logs_tail_lines", 50))
        try:
            self._gateway.ensure_managed(name)
            return self._gateway.fetch_logs(name, lines)
        except RuntimeGatewayError as exc:
            return exc.message

    def list_files(self, name: str, path: str = "/") -> OperationResult:
        """Листинг директории внутри контейнера, data содержит список FileEntry."""

        try:
            self._gateway.ensure_managed(name)
            entries = self._gateway.list_directory(name, path)
        except RuntimeGatewayError as exc:
            return OperationResult.from_exception(exc)
        return OperationResult.ok(entries)

    # --------------------------------------------------------------- connection
    def get_connection_info(self, name: str) -> Optional[ConnectionInfo]:
        server = self.get_server(name)
        if server is None:
            return None
        return ConnectionInfo(
            host=self._connection_host(),
            port=server.port,
            username=server.username,
            password=server.password,
        )

    def format_connection_info(
        self, name: str, fmt: ConnectionFormat = ConnectionFormat.FULL
    ) -> Optional[str]:
        info = self.get_connection_info(name)
        if info is None:
            return None
        return info.format(fmt)

    def _connection_host(self) -> str:
        """Адрес для клиента: при привязке к 0.0.0.0 берётся реальный интерфейс."""

        interfaces = self._enumerator.list_interfaces()
        binding = resolve_binding(interfaces, self._preferences.load())
        if binding.address != ALL_INTERFACES_ADDRESS:
            return binding.address
        concrete = [item for item in interfaces if item.address != ALL_INTERFACES_ADDRESS]
        for interface in concrete:
            if not interface.is_vpn:
                return interface.address
        return concrete[0].address if concrete else LOOPBACK_ADDRESS

    # ------------------------------------------------------------------ network
    def list_network_interfaces(self) -> List[NetworkInterface]:
        return self._enumerator.list_interfaces()

    def resolve_binding(self) -> BindingResolution:
        return resolve_binding(self._enumerator.list_interfaces(), self._preferences.load())

    def get_local_address(self) -> str:
        return self.resolve_binding().address

    def get_network_info(self) -> NetworkInfo:
        config = self._preferences.load()
        binding = resolve_binding(self._enumerator.list_interfaces(), config)
        return NetworkInfo(
            current_ip=binding.address,
            current_interface=binding.interface_name,
            is_vpn=binding.is_vpn,
            preferred_interface=config.preferred_interface,
            preferred_ip=config.preferred_ip,
        )

    def set_network_preference(
        self, ip: Optional[str] = None, interface_name: Optional[str] = None
    ) -> OperationResult:
        """Сохраняет IP или интерфейс; одно значение всегда сбрасывает другое."""

        if ip and interface_name:
            return OperationResult.fail(
                "Specify either an IP address or an interface name, not both",
                ErrorKind.INVALID_REQUEST,
            )
        try:
            if ip:
                config = self._preferences.set_preferred_ip(ip)
            elif interface_name:
                config = self._preferences.set_preferred_interface(interface_name)
            else:
                config = self._preferences.clear()
        except PersistenceError as exc:
            return OperationResult.from_exception(exc)
        return OperationResult.ok(config)

    def clear_network_preference(self) -> OperationResult:
        return self.set_network_preference()

    def select_network(self, value: str) -> OperationResult:
        """Ищет значение среди адресов, затем среди имён интерфейсов."""

        interfaces = self._enumerator.list_interfaces()
        for interface in interfaces:
            if interface.address == value:
                return self.set_network_preference(ip=interface.address)
        for interface in interfaces:
            if interface.name == value:
                return self.set_network_preference(interface_name=interface.name)
        return OperationResult.fail(
            f"Network interface or IP not found: {value}", ErrorKind.INVALID_REQUEST
        )
