"""Producer PIN gate endpoints.

The attempt counter and session marker live in the calling browser's
namespace (see ClientIdMiddleware). The IP rate limit on POST is the
server-side backstop for clients that discard their cookie.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from portal.api.deps import ClientPinGate, CurrentProducer
from portal.core.client_ip import get_client_ip
from portal.core.errors import AccountLockedError, InvalidPinError
from portal.core.rate_limit import RateLimits, limiter
from portal.schemas.auth import PinLoginRequest, PinStatusResponse, ProducerInfo
from portal.schemas.common import MessageResponse

router = APIRouter()


def _ms_to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@router.post("/pin", response_model=PinStatusResponse)
@limiter.limit(RateLimits.PIN)
async def enter_pin(
    request: Request,
    body: PinLoginRequest,
    gate: ClientPinGate,
):
    """Verify the studio PIN and open an 8 hour session for this browser."""
    result = gate.verify(body.pin, ip_address=get_client_ip(request))

    if result.locked:
        raise AccountLockedError(retry_after=result.lockout_seconds or 1)
    if not result.ok:
        raise InvalidPinError(remaining_attempts=result.remaining_attempts or 0)

    return PinStatusResponse(
        authenticated=True,
        remaining_attempts=result.remaining_attempts,
        session_expires_at=_ms_to_datetime(gate.session.expires_at()),
    )


@router.get("/pin", response_model=PinStatusResponse)
async def pin_status(gate: ClientPinGate):
    """Report the PIN gate state for this browser."""
    authenticated = gate.is_authenticated()
    lockout = gate.limiter.check_lockout()
    return PinStatusResponse(
        authenticated=authenticated,
        locked=lockout.is_locked,
        remaining_attempts=gate.limiter.get_remaining_attempts(),
        lockout_seconds=lockout.remaining_seconds if lockout.is_locked else None,
        session_expires_at=_ms_to_datetime(gate.session.expires_at()) if authenticated else None,
    )


@router.delete("/pin", response_model=MessageResponse)
async def exit_pin(gate: ClientPinGate):
    """End the PIN session for this browser."""
    gate.logout()
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=ProducerInfo)
async def whoami(producer: CurrentProducer):
    """Identity behind the current producer credentials."""
    return ProducerInfo(email=producer.email, via_pin=producer.via_pin)
