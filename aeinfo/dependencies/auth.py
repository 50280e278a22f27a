from typing import Optional

from fastapi import Depends, Request

from aeinfo.core.exceptions import AdminRequired, LoginRequired
from aeinfo.core.logger import get_logger
from aeinfo.dependencies.platform import get_platform
from aeinfo.schemas.user import CurrentUser
from aeinfo.services.platform import Platform

logger = get_logger(__name__)


def require_admin(
    request: Request,
    platform: Platform = Depends(get_platform),
) -> Optional[CurrentUser]:
    """
    Gate for administrative pages.
    The development server is open to everyone; elsewhere an anonymous
    caller is sent to the login page and a non-admin caller is refused.
    """
    if platform.environment.is_dev_app_server():
        return None

    user = platform.identity.current_user(request)
    if user is None:
        # LoginURLError propagates and is answered with a 500
        login_url = platform.identity.login_url(str(request.url))
        logger.info("anonymous request to %s, redirecting to login", request.url.path)
        raise LoginRequired(login_url)

    if not user.is_admin:
        logger.info("non-admin %s refused on %s", user.email, request.url.path)
        raise AdminRequired()
    return user
