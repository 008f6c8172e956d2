"""Pydantic schemas for location API."""
from datetime import datetime

from pydantic import BaseModel


class LocationSummary(BaseModel):
    """One row of GET /v1/locations: location joined with its parameters."""

    locationId: str
    name: str
    address: str
    googleMapsUrl: str
    openingHours: str
    createdAt: datetime | None = None
    avgDevicesPerPerson: float | None = None
    avgSimsPerPerson: float | None = None
    wifiUsageRatio: float | None = None
    cellularUsageRatio: float | None = None
    updateInterval: int | None = None
    lastRecordUpdated: datetime | None = None
    lastMetricUpdated: datetime | None = None


class LocationMutationResponse(BaseModel):
    """Response for add and update."""

    message: str
    locationId: str


class LocationDeleteResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
