import asyncio
import contextlib
from fastapi import FastAPI, Request
from aeinfo.core.config import settings
from aeinfo.core.exceptions import PlatformError
from aeinfo.core.logger import setup_logging
from aeinfo.middleware.request_context import RequestContextMiddleware
from aeinfo.database.connection import Base, engine, SessionLocal
from aeinfo.models import module_version, task  # noqa: F401  (register tables)
from aeinfo.routes.info import router as info_router, serve_error
from aeinfo.services.cache_service import MemoryCache
from aeinfo.services.environment import SettingsEnvironment
from aeinfo.services.identity import TokenIdentityService
from aeinfo.services.module_service import SqlModuleRegistry
from aeinfo.services.platform import Platform
from aeinfo.services.runtime_service import ProcessRuntimeStats, runtime_sampler_loop
from aeinfo.services.taskqueue_service import SqlTaskQueue


def build_platform(session_factory=SessionLocal) -> Platform:
    """Local stand-ins for the managed platform services."""
    return Platform(
        environment=SettingsEnvironment(settings),
        identity=TokenIdentityService(settings),
        cache=MemoryCache(),
        taskqueue=SqlTaskQueue(session_factory),
        modules=SqlModuleRegistry(session_factory),
        runtime=ProcessRuntimeStats(),
    )


app = FastAPI(title="App Engine style instance diagnostics")

app.add_middleware(RequestContextMiddleware)

app.include_router(info_router)


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    return serve_error(exc)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    if getattr(app.state, "platform", None) is None:
        app.state.platform = build_platform()
    runtime = app.state.platform.runtime
    if isinstance(runtime, ProcessRuntimeStats):
        app.state.sampler_task = asyncio.create_task(
            runtime_sampler_loop(runtime, settings.RUNTIME_SAMPLE_SECONDS)
        )


@app.on_event("shutdown")
async def shutdown_event():
    sampler = getattr(app.state, "sampler_task", None)
    if sampler is not None:
        sampler.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sampler
