"""Shoot endpoints.

Producer routes (list, create, read, update, delete) require a producer
credential. The view and accept-terms routes are the client gate: they
take the shoot's access token or a share link token.
"""

from fastapi import APIRouter, Query, Request, status

from portal.api.deps import CurrentProducer, DBSession
from portal.core.client_ip import get_client_ip
from portal.core.rate_limit import RateLimits, limiter, producer_limiter
from portal.schemas.common import MessageResponse
from portal.schemas.shoot import (
    AcceptTermsRequest,
    AcceptTermsResponse,
    PhaseInfo,
    ShootAdminResponse,
    ShootCreate,
    ShootUpdate,
    ShootViewResponse,
)
from portal.services.access import resolve_viewer_access
from portal.services.shoot_service import ShootService, to_admin_response, to_public_response
from portal.workflow.phases import get_default_phase, get_shoot_phases

router = APIRouter()


@router.get("", response_model=list[ShootAdminResponse])
async def list_shoots(db: DBSession, producer: CurrentProducer):
    """List all shoots, newest first."""
    shoots = await ShootService(db).list_shoots()
    return [to_admin_response(shoot) for shoot in shoots]


@router.post("", response_model=ShootAdminResponse, status_code=status.HTTP_201_CREATED)
@producer_limiter.limit(RateLimits.STANDARD)
async def create_shoot(request: Request, body: ShootCreate, db: DBSession, producer: CurrentProducer):
    """Create a shoot. The access token is generated server-side."""
    shoot = await ShootService(db).create_shoot(body)
    return to_admin_response(shoot)


@router.get("/{shoot_id}", response_model=ShootAdminResponse)
async def get_shoot(shoot_id: str, db: DBSession, producer: CurrentProducer):
    shoot = await ShootService(db).get_shoot_or_404(shoot_id)
    return to_admin_response(shoot)


@router.put("/{shoot_id}", response_model=ShootAdminResponse)
@producer_limiter.limit(RateLimits.STANDARD)
async def update_shoot(
    request: Request,
    shoot_id: str,
    body: ShootUpdate,
    db: DBSession,
    producer: CurrentProducer,
):
    """Partially update a shoot. Statuses are normalized on save."""
    shoot = await ShootService(db).update_shoot(shoot_id, body)
    return to_admin_response(shoot)


@router.delete("/{shoot_id}", response_model=MessageResponse)
@producer_limiter.limit(RateLimits.STANDARD)
async def delete_shoot(request: Request, shoot_id: str, db: DBSession, producer: CurrentProducer):
    """Delete a shoot together with its share links."""
    await ShootService(db).delete_shoot(shoot_id)
    return MessageResponse(message="Shoot deleted")


@router.get("/{shoot_id}/view", response_model=ShootViewResponse)
@limiter.limit(RateLimits.LINK)
async def view_shoot(
    request: Request,
    shoot_id: str,
    db: DBSession,
    token: str | None = Query(None, max_length=256),
):
    """Client shoot page. Any token failure is the same 401."""
    shoot, expires_at = await resolve_viewer_access(
        db, shoot_id, token, ip_address=get_client_ip(request)
    )
    public = to_public_response(shoot)
    visible = get_shoot_phases(public)
    return ShootViewResponse(
        shoot=public,
        phases=PhaseInfo(visible=visible, default=get_default_phase(visible)),
        expires_at=expires_at,
    )


@router.post("/{shoot_id}/accept-terms", response_model=AcceptTermsResponse)
@limiter.limit(RateLimits.LINK)
async def accept_terms(
    request: Request,
    shoot_id: str,
    body: AcceptTermsRequest,
    db: DBSession,
):
    """Record the client's acceptance of the shoot terms (first one wins)."""
    ip_address = get_client_ip(request)
    shoot, _ = await resolve_viewer_access(db, shoot_id, body.token, ip_address=ip_address)
    shoot = await ShootService(db).accept_terms(shoot, ip_address=ip_address)
    return AcceptTermsResponse(
        client_accepted_terms=shoot.client_accepted_terms,
        terms_accepted_at=shoot.terms_accepted_at,
    )
