# aeinfo/services/info_service.py
"""
Aggregation of the diagnostic report.

The statistics queries are independent of each other, so they run as one
group of concurrent tasks. The first failure cancels the rest of the group
and is the only thing returned; a report is either complete or absent.
"""
import asyncio
from typing import Any, Awaitable, Dict, List, Optional

from starlette.requests import Request

from aeinfo.core.constants import (
    DEFAULT_QUEUE,
    HEADER_CITY,
    HEADER_CITY_LAT_LONG,
    HEADER_COUNTRY,
    HEADER_REGION,
)
from aeinfo.core.exceptions import PlatformError, ProviderError, QueueStatsError
from aeinfo.core.logger import get_logger
from aeinfo.schemas.info import (
    CacheStats,
    CallerInfo,
    Info,
    ModuleInfo,
    QueueStats,
    RuntimeStats,
)
from aeinfo.services.platform import Platform

logger = get_logger(__name__)


async def _run_all(jobs: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
    """
    Run every job concurrently and return their results by name.
    On the first failure the still running jobs are cancelled and the
    failure is raised as a PlatformError.
    """
    tasks = {name: asyncio.create_task(job, name=name) for name, job in jobs.items()}
    try:
        done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)

        for name, task in tasks.items():
            if task not in done or task.cancelled():
                continue
            exc = task.exception()
            if exc is None:
                continue

            for other in pending:
                other.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            logger.error("%s query failed: %s", name, exc)
            if isinstance(exc, PlatformError):
                raise exc
            raise ProviderError(name, str(exc) or exc.__class__.__name__) from exc

        return {name: task.result() for name, task in tasks.items()}
    finally:
        for task in tasks.values():
            if not task.done():
                task.cancel()


# ---------- individual queries ----------

async def _cache_stats(platform: Platform) -> CacheStats:
    stats = await platform.cache.stats()
    if stats is None:
        # no statistics yet is a valid, empty state
        return CacheStats()
    return stats


async def _queue_stats(platform: Platform) -> QueueStats:
    try:
        stats = await platform.taskqueue.queue_stats([DEFAULT_QUEUE])
    except Exception as exc:
        logger.error("queue stats for %s failed: %s", DEFAULT_QUEUE, exc)
        raise QueueStatsError() from exc
    if not stats:
        raise QueueStatsError()
    return stats[0]


async def _modules(platform: Platform) -> List[ModuleInfo]:
    names = await platform.modules.list_modules()
    modules: List[ModuleInfo] = []
    for name in names:
        versions = await platform.modules.versions(name)
        modules.append(ModuleInfo(name=name, versions=list(versions)))
    return modules


async def _runtime_stats(platform: Platform) -> RuntimeStats:
    return await platform.runtime.stats()


def _caller(platform: Platform, request: Request) -> CallerInfo:
    user = platform.identity.current_user(request)
    remote_addr = ""
    if request.client:
        remote_addr = f"{request.client.host}:{request.client.port}"
    headers = request.headers
    return CallerInfo(
        remote_addr=remote_addr,
        user_agent=headers.get("User-Agent", ""),
        country=headers.get(HEADER_COUNTRY, ""),
        region=headers.get(HEADER_REGION, ""),
        city=headers.get(HEADER_CITY, ""),
        city_lat_long=headers.get(HEADER_CITY_LAT_LONG, ""),
        email=user.email if user else "",
    )


# ---------- GATHER ----------

async def gather(platform: Platform, request: Request) -> Info:
    results = await _run_all({
        "memcache": _cache_stats(platform),
        "taskqueue": _queue_stats(platform),
        "modules": _modules(platform),
        "runtime": _runtime_stats(platform),
    })

    env = platform.environment
    runtime: RuntimeStats = results["runtime"]
    info = Info(
        app_id=env.app_id(),
        datacenter=env.datacenter(),
        default_version_hostname=env.default_version_hostname(),
        instance_id=env.instance_id(),
        is_dev_app_server=env.is_dev_app_server(),
        module_name=env.module_name(),
        server_software=env.server_software(),
        version_id=env.version_id(),
        server_time=env.now(),
        runtime_version=env.runtime_version(),
        cpu=runtime.cpu,
        ram=runtime.ram,
        modules=results["modules"],
        memcache=results["memcache"],
        taskqueue=results["taskqueue"],
        caller=_caller(platform, request),
    )
    logger.debug("gathered report for %s", info.app_id)
    return info


def serialize(info: Info) -> str:
    return info.model_dump_json(by_alias=True)
