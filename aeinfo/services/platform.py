"""
Interfaces of the platform services the diagnostic report reads from.

Each collaborator is a Protocol so the route can be served by the local
stand-ins in this package or by any client of a real managed service.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from starlette.requests import Request

from aeinfo.schemas.info import CacheStats, QueueStats, RuntimeStats
from aeinfo.schemas.user import CurrentUser


class EnvironmentInfo(Protocol):
    def app_id(self) -> str: ...
    def datacenter(self) -> str: ...
    def default_version_hostname(self) -> str: ...
    def instance_id(self) -> str: ...
    def is_dev_app_server(self) -> bool: ...
    def module_name(self) -> str: ...
    def server_software(self) -> str: ...
    def version_id(self) -> str: ...
    def runtime_version(self) -> str: ...
    def now(self) -> datetime: ...


class IdentityService(Protocol):
    def current_user(self, request: Request) -> Optional[CurrentUser]: ...
    def login_url(self, dest: str) -> str: ...


class CacheStatsProvider(Protocol):
    async def stats(self) -> Optional[CacheStats]:
        """Return None when the cache has no statistics yet."""
        ...


class QueueStatsProvider(Protocol):
    async def queue_stats(self, names: Sequence[str]) -> List[QueueStats]: ...


class ModuleRegistry(Protocol):
    async def list_modules(self) -> List[str]: ...
    async def versions(self, module: str) -> List[str]: ...


class RuntimeStatsProvider(Protocol):
    async def stats(self) -> RuntimeStats: ...


@dataclass(frozen=True)
class Platform:
    environment: EnvironmentInfo
    identity: IdentityService
    cache: CacheStatsProvider
    taskqueue: QueueStatsProvider
    modules: ModuleRegistry
    runtime: RuntimeStatsProvider
