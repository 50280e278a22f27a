from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from pydantic_core import PydanticSerializationError

from aeinfo.core.constants import SERVE_URL
from aeinfo.core.exceptions import LoginRequired, PlatformError, SerializationError
from aeinfo.core.logger import get_logger
from aeinfo.dependencies.auth import require_admin
from aeinfo.dependencies.platform import get_platform
from aeinfo.services.info_service import gather, serialize
from aeinfo.services.platform import Platform

logger = get_logger(__name__)

router = APIRouter(tags=["Diagnostics"])


def serve_error(exc: PlatformError) -> Response:
    if isinstance(exc, LoginRequired):
        return RedirectResponse(exc.login_url, status_code=exc.status_code)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@router.get(SERVE_URL, dependencies=[Depends(require_admin)])
async def aeinfo_report(request: Request, platform: Platform = Depends(get_platform)):
    """
    Admin-only snapshot of instance identity, runtime usage, cache,
    task queue and deployed module versions.
    """
    try:
        info = await gather(platform, request)
    except PlatformError as exc:
        return serve_error(exc)

    # encode fully before anything is written so a failure can still set the status
    try:
        body = serialize(info)
    except (PydanticSerializationError, ValueError) as exc:
        logger.error("unable to encode report: %s", exc)
        return serve_error(SerializationError(str(exc)))

    return Response(content=body, media_type="application/json")
