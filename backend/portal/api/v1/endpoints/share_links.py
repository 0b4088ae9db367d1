"""Share link endpoints.

Issuing, listing and revoking links needs an allow-listed producer
token. Resolution is public and answers every failure with the same 401.
"""

from fastapi import APIRouter, Query, Request

from portal.api.deps import AllowlistedProducer, DBSession
from portal.core.client_ip import get_client_ip
from portal.core.rate_limit import RateLimits, limiter, producer_limiter
from portal.models.share_link import as_utc
from portal.schemas.share_link import (
    ShareLinkCreateRequest,
    ShareLinkCreateResponse,
    ShareLinkResolveRequest,
    ShareLinkResolveResponse,
    ShareLinkResponse,
)
from portal.services.shoot_service import ShootService, to_public_response
from portal.services.share_link_service import ShareLinkService

router = APIRouter()


@router.post("", response_model=ShareLinkCreateResponse, status_code=201)
@producer_limiter.limit(RateLimits.SHARE_LINK_CREATE)
async def create_share_link(
    request: Request,
    body: ShareLinkCreateRequest,
    db: DBSession,
    producer: AllowlistedProducer,
):
    """Issue a share link. The token appears only in the returned URL."""
    issued = await ShareLinkService(db).create(
        body.shoot_id,
        ttl_hours=body.ttl_hours,
        created_by_email=producer.email,
        origin=request.headers.get("origin"),
    )
    return ShareLinkCreateResponse(
        id=issued.link.id,
        share_url=issued.share_url,
        expires_at=as_utc(issued.link.expires_at),
    )


@router.post("/resolve", response_model=ShareLinkResolveResponse)
@limiter.limit(RateLimits.LINK)
async def resolve_share_link(
    request: Request,
    body: ShareLinkResolveRequest,
    db: DBSession,
):
    resolved = await ShareLinkService(db).resolve(
        body.shoot_id, body.token, ip_address=get_client_ip(request)
    )
    return ShareLinkResolveResponse(
        shoot=to_public_response(resolved.shoot),
        expires_at=resolved.expires_at,
    )


@router.get("", response_model=list[ShareLinkResponse])
async def list_share_links(
    db: DBSession,
    producer: AllowlistedProducer,
    shoot_id: str = Query(..., min_length=1, max_length=100),
):
    """Share links issued for a shoot, newest first."""
    await ShootService(db).get_shoot_or_404(shoot_id)
    return await ShareLinkService(db).list_for_shoot(shoot_id)


@router.post("/{link_id}/revoke", response_model=ShareLinkResponse)
async def revoke_share_link(link_id: str, db: DBSession, producer: AllowlistedProducer):
    """Revoke a share link. Revoking an already revoked link is a no-op."""
    return await ShareLinkService(db).revoke(link_id, revoked_by=producer.email)
