"""Per-tenant feature flags for the marketing landing page.

The tenant is chosen with the TENANT setting. Unknown tenants get the
generic (demo) flag set.
"""

from dataclasses import asdict, dataclass

from portal.core.config import settings


@dataclass(frozen=True)
class FeatureFlags:
    gift_cards: bool
    package_catalog: bool
    tally_forms: bool
    # E-mail notifications on status changes
    notifications: bool
    analytics: bool
    multi_photographer: bool

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


FEATURES_BY_TENANT: dict[str, FeatureFlags] = {
    "olga": FeatureFlags(
        gift_cards=True,
        package_catalog=True,
        tally_forms=True,
        notifications=False,
        analytics=False,
        multi_photographer=False,
    ),
    "generic": FeatureFlags(
        gift_cards=False,
        package_catalog=False,
        tally_forms=False,
        notifications=False,
        analytics=False,
        multi_photographer=False,
    ),
}

DEFAULT_TENANT = "generic"


def get_features(tenant: str | None = None) -> FeatureFlags:
    """Get the flag set for a tenant (defaults to the configured tenant)."""
    tenant = (tenant or settings.TENANT or DEFAULT_TENANT).strip().lower()
    return FEATURES_BY_TENANT.get(tenant, FEATURES_BY_TENANT[DEFAULT_TENANT])


def is_feature_enabled(feature: str, tenant: str | None = None) -> bool:
    """Check a single flag; unknown flag names read as disabled."""
    return bool(getattr(get_features(tenant), feature, False))
