"""Validate location payloads before any database access.

A field counts as missing only when it is absent or null. Numeric parameter
fields accept 0 and false. Text fields must be non-blank strings and are
stored exactly as sent.
"""
import math
from typing import Any

LOCATION_FIELDS = ("name", "address", "googleMapsUrl", "openingHours")
PARAMETER_FIELDS = (
    "avgDevicesPerPerson",
    "avgSimsPerPerson",
    "wifiUsageRatio",
    "cellularUsageRatio",
    "updateInterval",
)

# JSON name -> column name
_LOCATION_COLUMNS = {
    "name": "name",
    "address": "address",
    "googleMapsUrl": "google_maps_url",
    "openingHours": "opening_hours",
}
_PARAMETER_COLUMNS = {
    "avgDevicesPerPerson": "avg_devices_per_person",
    "avgSimsPerPerson": "avg_sims_per_person",
    "wifiUsageRatio": "wifi_usage_ratio",
    "cellularUsageRatio": "cellular_usage_ratio",
    "updateInterval": "update_interval",
}

ADD_MISSING_FIELDS = (
    "Missing required fields: id, name, address, googleMapsUrl, openingHours, "
    "parameters(avgDevicesPerPerson, avgSimsPerPerson, wifiUsageRatio, cellularUsageRatio, updateInterval)"
)
LOCATION_ID_REQUIRED = "Location ID is required in the URL parameter"
EMPTY_BODY = "Request body is empty"
UPDATE_MISSING_LOCATION_FIELDS = "Required location fields are missing (name, address, googleMapsUrl, openingHours)"
UPDATE_MISSING_PARAMETERS = "Location parameters are required"
UPDATE_MISSING_PARAMETER_FIELDS = (
    "All parameter fields are required "
    "(avgDevicesPerPerson, avgSimsPerPerson, wifiUsageRatio, cellularUsageRatio, updateInterval)"
)
UPDATE_INTERVAL_NOT_INTEGER = "updateInterval must be an integer"

ValidationResult = tuple[bool, dict[str, Any] | None, str]


def is_present(value: Any) -> bool:
    """True unless the value is absent (None). 0, 0.0 and False are present."""
    return value is not None


def _get_str(payload: dict[str, Any], key: str) -> str | None:
    """Get stripped string value for presence checks; empty or whitespace-only string treated as missing."""
    v = payload.get(key)
    if not isinstance(v, str):
        return None
    s = v.strip()
    return s if s else None


def _to_number(value: Any) -> float | int | None:
    """Coerce a present JSON value to a number; None if it is not numeric."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _normalize_location_fields(payload: dict[str, Any]) -> dict[str, str] | None:
    fields = {}
    for key in LOCATION_FIELDS:
        if _get_str(payload, key) is None:
            return None
        fields[_LOCATION_COLUMNS[key]] = payload[key]
    return fields


def _missing_parameters(params: dict[str, Any]) -> list[str]:
    return [key for key in PARAMETER_FIELDS if not is_present(params.get(key))]


def _normalize_parameters(params: dict[str, Any]) -> tuple[dict[str, Any] | None, str]:
    """Convert present parameter fields to column values, or report non-numeric ones.

    updateInterval must also be a whole number; 60.0 is accepted as 60.
    """
    normalized: dict[str, Any] = {}
    invalid = []
    for key in PARAMETER_FIELDS:
        number = _to_number(params[key])
        if number is None:
            invalid.append(key)
        else:
            normalized[_PARAMETER_COLUMNS[key]] = number
    if invalid:
        return None, f"Parameter fields must be numeric: {', '.join(invalid)}"

    interval = normalized["update_interval"]
    if isinstance(interval, float):
        if not interval.is_integer():
            return None, UPDATE_INTERVAL_NOT_INTEGER
        normalized["update_interval"] = int(interval)
    return normalized, ""


def validate_location_id(location_id: Any) -> ValidationResult:
    """Route id for update/delete must be a non-blank string."""
    if not isinstance(location_id, str) or not location_id.strip():
        return False, None, LOCATION_ID_REQUIRED
    return True, {"location_id": location_id}, ""


def validate_add_payload(payload: Any) -> ValidationResult:
    """
    Validate a POST /locations/add body. Returns (ok, normalized, error_message).
    normalized = {"location": {...column values incl. id...}, "parameters": {...column values...}}.
    """
    if not isinstance(payload, dict):
        return False, None, ADD_MISSING_FIELDS
    location_id = payload.get("id") if _get_str(payload, "id") else None
    fields = _normalize_location_fields(payload)
    params = payload.get("parameters")
    if location_id is None or fields is None or not isinstance(params, dict) or _missing_parameters(params):
        return False, None, ADD_MISSING_FIELDS

    parameters, err = _normalize_parameters(params)
    if parameters is None:
        return False, None, err
    return True, {"location": {"id": location_id, **fields}, "parameters": parameters}, ""


def validate_update_payload(location_id: Any, payload: Any) -> ValidationResult:
    """
    Validate a PUT /locations/update/{locationId} request. Returns (ok, normalized, error_message).
    Checks run in order: route id, body, location fields, parameters object, parameter fields.
    """
    ok, normalized_id, err = validate_location_id(location_id)
    if not ok or normalized_id is None:
        return False, None, err
    if not payload or not isinstance(payload, dict):
        return False, None, EMPTY_BODY
    fields = _normalize_location_fields(payload)
    if fields is None:
        return False, None, UPDATE_MISSING_LOCATION_FIELDS
    params = payload.get("parameters")
    if not isinstance(params, dict):
        return False, None, UPDATE_MISSING_PARAMETERS
    if _missing_parameters(params):
        return False, None, UPDATE_MISSING_PARAMETER_FIELDS

    parameters, err = _normalize_parameters(params)
    if parameters is None:
        return False, None, err
    return True, {"location_id": normalized_id["location_id"], "location": fields, "parameters": parameters}, ""
