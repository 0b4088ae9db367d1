"""HTTP middleware: security headers and the per-browser client id cookie."""

import re
import secrets
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from portal.core.config import settings

CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,64}$")

# One year; the id carries no authority of its own
CLIENT_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def is_valid_client_id(value: str | None) -> bool:
    return bool(value) and CLIENT_ID_PATTERN.fullmatch(value) is not None


def new_client_id() -> str:
    return secrets.token_urlsafe(24)


class ClientIdMiddleware(BaseHTTPMiddleware):
    """Give every browser an opaque client id.

    The id names the key-value namespace holding that browser's PIN
    attempt record and PIN session. A missing or malformed cookie gets a
    fresh id, set on the response whatever its status, so a failed PIN
    attempt still reaches the browser with the id it was counted under.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        client_id = request.cookies.get(settings.CLIENT_COOKIE_NAME)
        issued = False
        if not is_valid_client_id(client_id):
            client_id = new_client_id()
            issued = True
        request.state.client_id = client_id

        response = await call_next(request)

        if issued:
            response.set_cookie(
                key=settings.CLIENT_COOKIE_NAME,
                value=client_id,
                httponly=True,
                secure=settings.cookie_secure,
                samesite=settings.COOKIE_SAMESITE,
                max_age=CLIENT_COOKIE_MAX_AGE,
                path="/",
            )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard security headers on every response.

    Requests carrying a token in the query string additionally get
    Referrer-Policy: no-referrer so the token cannot leak via Referer.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "accelerometer=(), camera=(), geolocation=(), gyroscope=(), "
            "magnetometer=(), microphone=(), payment=(), usb=()"
        )

        if "token" in request.query_params:
            response.headers["Referrer-Policy"] = "no-referrer"

        if request.url.path.startswith("/api/"):
            response.headers["Content-Security-Policy"] = (
                "default-src 'none'; frame-ancestors 'none'"
            )
            if "Cache-Control" not in response.headers:
                response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"

        return response
