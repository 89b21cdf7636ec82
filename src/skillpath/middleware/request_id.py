"""Request context middleware: X-Request-Id plus the addressed user."""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_USER_PATH_RE = re.compile(r"^/api/v1/users/([^/]+)/")


def user_id_from_path(path: str) -> str | None:
    """Return the user id of a ``/api/v1/users/{user_id}/...`` path, else None."""
    match = _USER_PATH_RE.match(path)
    return match.group(1) if match else None


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Echo or generate X-Request-Id and bind request context for structlog.

    Engine log events (``catalog_entity_reused``, ``reconcile_entry_failed``,
    ``roadmap_backup_failed`` ...) then carry the request id and, on roadmap
    routes, the user id without threading them through every call.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        context = {"request_id": request_id, "path": request.url.path}
        user_id = user_id_from_path(request.url.path)
        if user_id is not None:
            context["user_id"] = user_id
        structlog.contextvars.bind_contextvars(**context)
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response
