"""
API Key Middleware

Guards every request to the device and command routes.

The check runs before routing, so a wrong method, an unknown sub-path and a
wrong key all get the same 401 when the key is missing or bad. Paths outside
the guarded prefixes (e.g. /health) pass through untouched.

Key lookup order:
1. x-api-key header
2. Authorization: Bearer <key>
3. api_key query parameter
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from mobile_api.common.logging_setup import get_service_logger
from mobile_api.services.auth.guard import AuthGuard

from ..errors import unauthorized_response

logger = get_service_logger("auth")

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY = "api_key"


def extract_api_key(request: Request) -> str | None:
    """Return the presented key, or None if the request carries none."""
    header_key = request.headers.get(API_KEY_HEADER)
    if header_key:
        return header_key

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return request.query_params.get(API_KEY_QUERY) or None


def is_guarded(path: str, prefixes: list[str]) -> bool:
    """True if path is one of the prefixes or anywhere below one."""
    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejects guarded requests that do not carry the device's key."""

    def __init__(self, app, guard: AuthGuard, guarded_prefixes: list[str]):
        super().__init__(app)
        self.guard = guard
        self.guarded_prefixes = [prefix.rstrip("/") for prefix in guarded_prefixes]

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if not is_guarded(path, self.guarded_prefixes):
            return await call_next(request)

        if self.guard.authorize(extract_api_key(request)):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        logger.warning(
            f"Rejected unauthorized {request.method} {path}",
            extra={"client": client, "path": path},
        )
        return unauthorized_response()
