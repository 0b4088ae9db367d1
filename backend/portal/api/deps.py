"""API dependencies for dependency injection."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.client_ip import get_client_ip
from portal.core.errors import ErrorCode, ForbiddenError, UnauthorizedError
from portal.core.logging_config import format_security_event
from portal.core.middleware import is_valid_client_id, new_client_id
from portal.core.pin_security import PinGate
from portal.core.security import decode_token, is_allowed_admin_email
from portal.core.storage import get_client_store
from portal.db.session import get_db

auth_logger = logging.getLogger("security.auth")

# auto_error=False: the bearer token is one of two ways in
security = HTTPBearer(auto_error=False)


@dataclass
class Producer:
    """Caller allowed to edit shoots.

    email is None when access comes from a PIN session, which proves
    knowledge of the studio PIN but not an identity.
    """

    email: str | None
    via_pin: bool = False


def get_client_id(request: Request) -> str:
    """Opaque per-browser id assigned by ClientIdMiddleware."""
    client_id = getattr(request.state, "client_id", None)
    if not is_valid_client_id(client_id):
        # Only reachable when the middleware is not installed
        client_id = new_client_id()
        request.state.client_id = client_id
    return client_id


def get_pin_gate(client_id: Annotated[str, Depends(get_client_id)]) -> PinGate:
    return PinGate(get_client_store(client_id))


def _log_auth_failure(request: Request, description: str, actor: str | None = None) -> None:
    auth_logger.warning(
        f"AUTH_FAILURE: {description}",
        extra=format_security_event(
            event_type="security.auth.producer_denied",
            severity="warning",
            description=description,
            actor=actor,
            ip_address=get_client_ip(request),
            metadata={"path": request.url.path, "method": request.method},
        ),
    )


async def get_current_producer(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Producer | None:
    """Resolve an allow-listed producer from a bearer JWT.

    No header yields None. A header that is present but invalid, or names
    an e-mail outside ADMIN_EMAIL_ALLOWLIST, is rejected outright.
    """
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        _log_auth_failure(request, "Invalid producer token")
        raise UnauthorizedError("Could not validate credentials")

    email = payload.get("email") or payload.get("sub")
    if not is_allowed_admin_email(email):
        _log_auth_failure(request, "Producer not in allow-list", actor=email)
        raise ForbiddenError("Producer is not allow-listed", code=ErrorCode.NOT_ALLOWLISTED)

    producer = Producer(email=email.strip().lower())
    request.state.producer = producer
    return producer


async def require_producer(
    request: Request,
    producer: Annotated[Producer | None, Depends(get_current_producer)],
    gate: Annotated[PinGate, Depends(get_pin_gate)],
) -> Producer:
    """Allow-listed bearer identity, or an active PIN session for this browser."""
    if producer is not None:
        return producer
    if gate.is_authenticated():
        return Producer(email=None, via_pin=True)
    _log_auth_failure(request, "Producer access without credentials")
    raise UnauthorizedError()


async def require_allowlisted_producer(
    request: Request,
    producer: Annotated[Producer | None, Depends(get_current_producer)],
) -> Producer:
    """Bearer identity only; a PIN session is not enough."""
    if producer is None:
        _log_auth_failure(request, "Share link management without producer token")
        raise UnauthorizedError()
    return producer


# Type aliases for commonly used dependencies
DBSession = Annotated[AsyncSession, Depends(get_db)]
ClientPinGate = Annotated[PinGate, Depends(get_pin_gate)]
CurrentProducer = Annotated[Producer, Depends(require_producer)]
AllowlistedProducer = Annotated[Producer, Depends(require_allowlisted_producer)]
