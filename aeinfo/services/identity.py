from typing import Optional
from urllib.parse import urlencode

from starlette.requests import Request

from aeinfo.core.config import Settings
from aeinfo.core.exceptions import LoginURLError
from aeinfo.core.security import decode_access_token
from aeinfo.schemas.user import CurrentUser


class TokenIdentityService:
    """
    Resolves the caller from a signed session token.

    The token is taken from the Authorization header (Bearer) or, failing
    that, from the session cookie. A missing, invalid or expired token
    means there is no caller.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def _token(self, request: Request) -> Optional[str]:
        auth = request.headers.get("Authorization", "")
        scheme, _, token = auth.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
        return request.cookies.get(self._settings.SESSION_COOKIE_NAME)

    def current_user(self, request: Request) -> Optional[CurrentUser]:
        token = self._token(request)
        if not token:
            return None

        token_data = decode_access_token(token)
        if not token_data.email:
            return None
        return CurrentUser(email=token_data.email, is_admin=token_data.role == "admin")

    def login_url(self, dest: str) -> str:
        if not self._settings.LOGIN_URL:
            raise LoginURLError("login url is not configured")
        sep = "&" if "?" in self._settings.LOGIN_URL else "?"
        return f"{self._settings.LOGIN_URL}{sep}{urlencode({'continue': dest})}"
