"""Location repository: list, exists, add, update, delete.

Writes span several tables and each runs inside one transaction_scope, with
statements flushed in a fixed order so foreign keys are always satisfied.
Existence checks happen before the transactional unit and are not locked
against concurrent writers for the same id.
"""
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from db import transaction_scope
from models.active_device import ActiveDevice
from models.location import Location
from models.location_parameters import LocationParameters
from models.main_metric import MainMetric
from models.pending_deactivation import PendingDeactivation
from utils.errors import ADD, DELETE, UPDATE

# Dependents purged before the location row, in this order.
DEPENDENT_MODELS = (ActiveDevice, PendingDeactivation, LocationParameters, MainMetric)


def get_location(session: Session, location_id: str) -> Optional[Location]:
    """Return a location by id or None."""
    return session.get(Location, location_id)


def get_parameters(session: Session, location_id: str) -> Optional[LocationParameters]:
    """Return the parameters row for a location or None."""
    return session.get(LocationParameters, location_id)


def location_exists(session: Session, location_id: str) -> bool:
    result = session.execute(
        select(func.count()).select_from(Location).where(Location.id == location_id)
    )
    return (result.scalar() or 0) > 0


def list_locations(session: Session) -> list[dict[str, Any]]:
    """Return every location joined with its parameters and the date of its latest metric."""
    last_metric = (
        select(func.max(MainMetric.date))
        .where(MainMetric.location_id == Location.id)
        .correlate(Location)
        .scalar_subquery()
    )
    stmt = (
        select(
            Location.id.label("locationId"),
            Location.name,
            Location.address,
            Location.google_maps_url.label("googleMapsUrl"),
            Location.opening_hours.label("openingHours"),
            Location.created_at.label("createdAt"),
            LocationParameters.avg_devices_per_person.label("avgDevicesPerPerson"),
            LocationParameters.avg_sims_per_person.label("avgSimsPerPerson"),
            LocationParameters.wifi_usage_ratio.label("wifiUsageRatio"),
            LocationParameters.cellular_usage_ratio.label("cellularUsageRatio"),
            LocationParameters.update_interval.label("updateInterval"),
            LocationParameters.last_updated.label("lastRecordUpdated"),
            last_metric.label("lastMetricUpdated"),
        )
        .outerjoin(LocationParameters, LocationParameters.location_id == Location.id)
        .order_by(Location.name, Location.id)
    )
    return [dict(row) for row in session.execute(stmt).mappings().all()]


def _insert_location(session: Session, location: dict[str, Any]) -> Location:
    loc = Location(**location)
    session.add(loc)
    session.flush()
    return loc


def _insert_parameters(session: Session, location_id: str, parameters: dict[str, Any]) -> None:
    session.add(LocationParameters(location_id=location_id, **parameters))
    session.flush()


def add_location(session: Session, location: dict[str, Any], parameters: dict[str, Any]) -> Location:
    """Insert a location and its parameters atomically.

    The location row is flushed first; a duplicate id fails there and the
    parameters insert never runs. The returned instance is expired by the
    commit, so reading it loads fresh state.
    """
    with transaction_scope(session, ADD):
        loc = _insert_location(session, location)
        _insert_parameters(session, location["id"], parameters)
    return loc


def update_location(
    session: Session,
    location_id: str,
    fields: dict[str, Any],
    parameters: dict[str, Any],
) -> Optional[Location]:
    """Update a location and upsert its parameters. Returns None (and writes nothing) if not found."""
    if not location_exists(session, location_id):
        return None
    with transaction_scope(session, UPDATE):
        loc = get_location(session, location_id)
        if loc is None:
            return None
        for column, value in fields.items():
            setattr(loc, column, value)
        session.flush()

        params = get_parameters(session, location_id)
        if params is not None:
            for column, value in parameters.items():
                setattr(params, column, value)
            params.last_updated = func.current_timestamp()
            session.flush()
        else:
            _insert_parameters(session, location_id, parameters)
    return loc


def delete_location(session: Session, location_id: str) -> bool:
    """Delete a location and all dependent rows. Returns True if deleted, False if not found."""
    if not location_exists(session, location_id):
        return False
    with transaction_scope(session, DELETE):
        for model in DEPENDENT_MODELS:
            session.execute(delete(model).where(model.location_id == location_id))
        session.execute(delete(Location).where(Location.id == location_id))
    return True
