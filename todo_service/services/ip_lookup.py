"""
Todo Service - IP Lookup
=========================

What:  Best-effort resolution of a request's origin address to descriptive
       information (country, region, city, network owner).
How:   One GET per lookup against a configurable provider URL using httpx,
       with a short timeout.
Who:   GET /ip, and the background task that logs where a token request
       came from.

Failure Semantics:
    A lookup never raises. Disabled lookups, private or malformed addresses,
    timeouts, HTTP errors and unparseable replies all return None and log
    at DEBUG or WARNING. The primary request is never blocked on failure.
"""

import ipaddress
import logging
from typing import Any, Dict, Optional

import httpx
from starlette.requests import Request

from todo_service.schemas.service import IPInfo

logger = logging.getLogger(__name__)


class IPLookupService:
    """
    Args:
        url_template: Provider URL with an `{ip}` placeholder
        timeout: Seconds for the whole request
        enabled: When False, lookup() returns None without any I/O
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        url_template: str,
        timeout: float = 2.0,
        enabled: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.enabled = enabled
        self._transport = transport

    async def lookup(self, ip: Optional[str]) -> Optional[IPInfo]:
        """Resolve `ip`; None when no information is available."""
        if not self.enabled or not ip:
            return None
        if not is_public_address(ip):
            logger.debug("Skipping lookup of non-public address %s", ip)
            return None

        url = self.url_template.format(ip=ip)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("IP lookup for %s failed: %s", ip, str(e))
            return None
        except ValueError as e:
            logger.warning("IP lookup for %s returned invalid JSON: %s", ip, str(e))
            return None

        if not isinstance(payload, dict):
            logger.warning("IP lookup for %s returned unexpected payload", ip)
            return None
        return _to_info(ip, payload)


def is_public_address(ip: str) -> bool:
    """False for malformed, private, loopback, link-local and reserved addresses."""
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return address.is_global


def client_ip(request: Request) -> Optional[str]:
    """
    Origin address of a request.

    The first X-Forwarded-For entry wins when present (the service is
    expected to sit behind a proxy); otherwise the socket peer is used.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def _to_info(ip: str, payload: Dict[str, Any]) -> IPInfo:
    # ipinfo.io style keys first, ip-api.com style as fallback
    def pick(*keys: str) -> Optional[str]:
        for key in keys:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
        return None

    return IPInfo(
        ip=pick("ip", "query") or ip,
        country=pick("country", "countryCode"),
        region=pick("region", "regionName"),
        city=pick("city"),
        org=pick("org", "isp"),
    )
