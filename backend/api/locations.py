"""Location API routes."""
from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import get_db
from repositories.location_repository import add_location as repo_add_location
from repositories.location_repository import delete_location as repo_delete_location
from repositories.location_repository import list_locations as repo_list_locations
from repositories.location_repository import update_location as repo_update_location
from schemas.locations import (
    ErrorResponse,
    LocationDeleteResponse,
    LocationMutationResponse,
    LocationSummary,
)
from utils.errors import (
    ADD,
    DELETE,
    LIST,
    UPDATE,
    LocationNotFoundError,
    LocationValidationError,
    classify_db_error,
)
from utils.validators import (
    LOCATION_ID_REQUIRED,
    validate_add_payload,
    validate_location_id,
    validate_update_payload,
)

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse}
    for code in (
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
}


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Log a store failure and re-raise it as the classified API error."""
    try:
        yield
    except SQLAlchemyError as e:
        LOG.error("[LOCATION-API] DB error on %s: %s", operation, e)
        raise classify_db_error(e, operation) from e


@router.get("", response_model=list[LocationSummary], responses=_ERROR_RESPONSES)
def list_locations(db: Session = Depends(get_db)) -> list[LocationSummary]:
    """List all locations with their parameters and latest metric date."""
    with _store_errors(LIST):
        rows = repo_list_locations(db)
    return [LocationSummary(**row) for row in rows]


@router.post(
    "/add",
    response_model=LocationMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
def add_location(
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
) -> LocationMutationResponse:
    """Create a location together with its parameters."""
    LOG.info("Location data received: %s", payload)
    ok, normalized, err = validate_add_payload(payload)
    if not ok or normalized is None:
        raise LocationValidationError(err)
    location_id = normalized["location"]["id"]
    with _store_errors(ADD):
        repo_add_location(db, normalized["location"], normalized["parameters"])
    return LocationMutationResponse(message="Location added successfully", locationId=location_id)


@router.put("/update/{location_id}", response_model=LocationMutationResponse, responses=_ERROR_RESPONSES)
def update_location(
    location_id: str,
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
) -> LocationMutationResponse:
    """Update a location's fields and create or refresh its parameters."""
    LOG.info("Location ID received: %s", location_id)
    LOG.info("Update data received: %s", payload)
    ok, normalized, err = validate_update_payload(location_id, payload)
    if not ok or normalized is None:
        raise LocationValidationError(err)
    with _store_errors(UPDATE):
        loc = repo_update_location(db, location_id, normalized["location"], normalized["parameters"])
    if loc is None:
        raise LocationNotFoundError()
    return LocationMutationResponse(message="Location updated successfully", locationId=location_id)


@router.delete("/remove/{location_id}", response_model=LocationDeleteResponse, responses=_ERROR_RESPONSES)
def delete_location(location_id: str, db: Session = Depends(get_db)) -> LocationDeleteResponse:
    """Delete a location and every record that references it."""
    ok, _, err = validate_location_id(location_id)
    if not ok:
        raise LocationValidationError(err)
    with _store_errors(DELETE):
        deleted = repo_delete_location(db, location_id)
    if not deleted:
        raise LocationNotFoundError()
    return LocationDeleteResponse(message="Location and associated data deleted successfully")


@router.put("/update", include_in_schema=False)
@router.delete("/remove", include_in_schema=False)
def missing_location_id() -> None:
    """Update and delete called without a location id in the path."""
    raise LocationValidationError(LOCATION_ID_REQUIRED)
