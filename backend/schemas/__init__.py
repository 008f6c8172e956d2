# Schemas package
from .health import HealthResponse
from .locations import ErrorResponse, LocationDeleteResponse, LocationMutationResponse, LocationSummary

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LocationDeleteResponse",
    "LocationMutationResponse",
    "LocationSummary",
]
