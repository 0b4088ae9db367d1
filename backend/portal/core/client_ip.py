"""Client IP detection for requests behind reverse proxies.

Used for the terms-acceptance audit trail and for security log events.

X-Forwarded-For is only honoured when the direct peer is a trusted proxy
listed in TRUSTED_PROXY_IPS; otherwise the socket peer address is used.
"""

import ipaddress
import logging
from functools import lru_cache

from fastapi import Request

from portal.core.config import settings

logger = logging.getLogger(__name__)

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


@lru_cache(maxsize=1)
def _get_trusted_proxy_networks() -> list[IPNetwork]:
    """Parse and cache TRUSTED_PROXY_IPS (single IPs or CIDR ranges)."""
    networks: list[IPNetwork] = []

    for ip_str in settings.TRUSTED_PROXY_IPS.split(","):
        ip_str = ip_str.strip()
        if not ip_str:
            continue
        try:
            networks.append(ipaddress.ip_network(ip_str, strict=False))
        except ValueError as e:
            logger.warning(f"Invalid trusted proxy IP/network '{ip_str}': {e}")

    return networks


def _is_trusted_proxy(ip_str: str) -> bool:
    try:
        ip_addr = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(ip_addr in network for network in _get_trusted_proxy_networks())


def get_client_ip(request: Request) -> str:
    """
    Get the real client IP address from a request.

    Algorithm:
    1. Take the direct connection IP (request.client.host)
    2. If it is a trusted proxy, walk X-Forwarded-For right to left and
       return the first address that is not itself a trusted proxy
    3. Fall back to the direct IP

    Returns "unknown" if no address can be determined.
    """
    direct_ip = request.client.host if request.client else None

    if not direct_ip:
        return "unknown"

    if not _is_trusted_proxy(direct_ip):
        return direct_ip

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        for ip in reversed([ip.strip() for ip in x_forwarded_for.split(",")]):
            if not ip:
                continue
            try:
                ipaddress.ip_address(ip)
            except ValueError:
                logger.warning(f"Invalid IP in X-Forwarded-For: {ip}")
                continue
            if not _is_trusted_proxy(ip):
                return ip

    return direct_ip


def clear_trusted_proxy_cache() -> None:
    """Clear the cached trusted proxy networks (e.g. during testing)."""
    _get_trusted_proxy_networks.cache_clear()
