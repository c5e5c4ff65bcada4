"""
Todo Service - Service Metadata Schemas
========================================

What:  Response models for the unauthenticated informational routes:
       GET / (index), GET /health and GET /ip.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class RouteInfo(BaseModel):
    method: str
    path: str
    auth_required: bool


class ServiceInfo(BaseModel):
    """Returned by GET / so clients can discover the API."""

    name: str = Field(description="Service name")
    version: str = Field(description="Application version")
    routes: List[RouteInfo] = Field(description="Every route in the route table")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Store backend and reachability, e.g. memory:ok")
    uptime_seconds: float = Field(description="Seconds since the app was created")


class IPInfo(BaseModel):
    """
    Descriptive information about an IP address.

    Every field except `ip` is optional: lookup providers differ in what
    they return and missing data is normal.
    """

    ip: str
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    org: Optional[str] = None


class IPLookupResponse(BaseModel):
    """Returned by GET /ip. `info` is null when the lookup was unavailable."""

    ip: Optional[str] = Field(description="Origin address of the request")
    info: Optional[IPInfo] = Field(default=None, description="Lookup result, if any")
