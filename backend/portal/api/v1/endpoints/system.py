"""System endpoints."""

from fastapi import APIRouter

from portal.core.config import settings
from portal.core.features import get_features
from portal.schemas.common import FeatureFlagsResponse

router = APIRouter()


@router.get("/features", response_model=FeatureFlagsResponse)
async def get_feature_flags():
    """Landing page feature flags for the configured tenant.

    Public: the flags only toggle marketing sections.
    """
    return FeatureFlagsResponse(
        tenant=settings.TENANT,
        features=get_features().to_dict(),
    )
