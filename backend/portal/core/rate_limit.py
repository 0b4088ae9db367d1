"""Server-side rate limiting.

IP-based limits sit in front of the endpoints a browser can hit without a
producer identity. They are independent of the per-client PIN attempt
counter in portal.core.pin_security, which a client can reset by dropping
its cookie.

Rate Limit Categories:
- PIN: PIN entry (strict - prevent brute force)
- LINK: share link resolution, shoot view, terms acceptance
- SHARE_LINK_CREATE: share link issuance, per producer
- STANDARD: producer shoot writes, per producer
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from portal.core.config import settings


def get_producer_identifier(request: Request) -> str:
    """
    Rate limit key for producer calls.

    Uses producer:{email} when the request carries a resolved producer,
    otherwise ip:{ip_address}.
    """
    producer = getattr(request.state, "producer", None)
    if producer and getattr(producer, "email", None):
        return f"producer:{producer.email}"
    return f"ip:{get_remote_address(request)}"


# IP-based limiter (for unauthenticated endpoints)
limiter = Limiter(key_func=get_remote_address)

# Producer-based limiter (for authenticated endpoints)
producer_limiter = Limiter(key_func=get_producer_identifier)


class RateLimits:
    """
    Centralized rate limit configurations.

    Format: "X/period" where period is: second, minute, hour, day
    Multiple limits can be combined: "100/minute;1000/hour"
    """

    PIN = "5/minute;30/hour"
    LINK = "30/minute;300/hour"
    SHARE_LINK_CREATE = "20/minute;200/hour"
    STANDARD = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"

