"""
Whitelist enforcement middleware for FastAPI/Starlette services.
"""

from typing import Iterable, Optional, Set

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from shared.errors import AuthorizationError
from shared.logging import clear_context, get_logger, set_request_context

from ..acl.base import ACL


def extract_client_ip(request: Request, ip_header: Optional[str] = None) -> Optional[str]:
    """Return the caller's address: first hop of ``ip_header`` if set, else the peer."""
    if ip_header:
        forwarded = request.headers.get(ip_header, "")
        if forwarded:
            candidate = forwarded.split(",")[0].strip()
            if candidate:
                return candidate

    client = request.client
    if client and client.host:
        return client.host.strip()
    return None


class WhitelistMiddleware(BaseHTTPMiddleware):
    """Reject requests from callers the whitelist does not permit."""

    def __init__(
        self,
        app,
        *,
        acl: ACL,
        allow_paths: Optional[Iterable[str]] = None,
        ip_header: Optional[str] = None,
    ) -> None:
        super().__init__(app)
        self.acl = acl
        self.allow_paths: Set[str] = {path.rstrip("/") or "/" for path in (allow_paths or [])}
        self.ip_header = ip_header
        self.logger = get_logger("whitelist.middleware")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path.rstrip("/") or "/"
        if path in self.allow_paths:
            return await call_next(request)

        client_ip = extract_client_ip(request, self.ip_header)
        set_request_context(request.headers.get("X-Request-ID"), client_ip)
        try:
            # Checks may block on locks or the concurrent worker pool
            allowed = client_ip is not None and await run_in_threadpool(self.acl.permitted, client_ip)
            if not allowed:
                self.logger.warning("Request blocked by whitelist", path=path, client_ip=client_ip)
                error = AuthorizationError(
                    "Client address is not whitelisted",
                    details={"client_ip": client_ip}
                )
                return JSONResponse(status_code=403, content=error.to_response().model_dump())

            request.state.client_ip = client_ip
            return await call_next(request)
        finally:
            clear_context()
