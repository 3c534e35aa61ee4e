"""
Input guards for RideShare API.

This module centralizes guard logic such as:
- Required field and identifier checks
- Format checks of contact details and identity documents
- Enum membership, vehicle and school specific rules

Every guard raises an exception from `app.src.exceptions` when validation
fails and returns the (possibly normalized) value otherwise, so that the
route handlers can check fields one at a time in declaration order.
"""

from typing import Any, List, Optional, Type
from enum import Enum
from uuid import UUID
from pydantic import BaseModel

from app.src import exceptions
from app.src.enums import DeleteType, Day
from app.src import functions


# ---------------------------------------------------------------------------
# Presence checks
# ---------------------------------------------------------------------------
def required(value: Any, fieldName: str) -> Any:
    """
    Ensure a required value was provided.

    Raises:
        exceptions.MissingField: If the value is None or an empty string.
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise exceptions.MissingField(fieldName)
    return value


def notNull(fParam: BaseModel, fields: List[str]) -> None:
    """
    Reject an explicit `null` sent for a column that can not be cleared.

    Raises:
        exceptions.InvalidValue: If one of the fields was sent as null or blank.
    """
    for field in fields:
        if field not in fParam.model_fields_set:
            continue
        value = getattr(fParam, field)
        if value is None or (isinstance(value, str) and value.strip() == ""):
            alias = type(fParam).model_fields[field].alias or field
            raise exceptions.InvalidValue(f"{alias} cannot be empty")


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------
def uuidString(value: str, message: str = "Invalid UUID provided") -> str:
    try:
        UUID(value)
    except ValueError:
        raise exceptions.InvalidIdentifier(message)
    return value


def numericID(value: str, message: str = "Invalid ID provided") -> int:
    if not value.isdigit() or not value.isascii():
        raise exceptions.InvalidIdentifier(message)
    return int(value)


def deleteType(value: str) -> DeleteType:
    try:
        return DeleteType(value)
    except ValueError:
        raise exceptions.InvalidDeleteType()


def enumMember(value: Optional[str], enumClass: Type[Enum], label: str):
    """
    Validate that the value is one of the members of the given enum.

    Returns:
        The enum member, or None when no value was provided.

    Raises:
        exceptions.InvalidValue: `Invalid <label>. Must be one of: <values>`.
    """
    if value is None:
        return None
    try:
        return enumClass(value)
    except ValueError:
        raise exceptions.InvalidValue(
            f"Invalid {label}. Must be one of: {functions.enumStr(enumClass)}"
        )


# ---------------------------------------------------------------------------
# Format checks
# ---------------------------------------------------------------------------
def check(isValid: bool, message: str) -> bool:
    """Raise `InvalidValue` carrying `message` unless `isValid` holds."""
    if not isValid:
        raise exceptions.InvalidValue(message)
    return True


def email(value: Optional[str]) -> Optional[str]:
    if value is not None:
        check(functions.isEmail(value), "Please provide a valid email address")
    return value


def phone(
    value: Optional[str],
    message: str = "Please provide a valid Indian mobile number (10 digits starting with 6-9)",
) -> Optional[str]:
    if value is not None:
        check(functions.isPhone(value), message)
    return value


def personName(value: Optional[str], label: str) -> Optional[str]:
    if value is not None:
        check(
            functions.isPersonName(value),
            f"{label} must be 2-50 characters and contain only letters and spaces",
        )
    return value


def imageURL(
    value: Optional[str], message: str = "Please provide a valid image URL"
) -> Optional[str]:
    if value is not None:
        check(functions.isImageURL(value), message)
    return value


def dateString(value: Optional[str], message: str) -> Optional[str]:
    if value is not None:
        check(functions.isDateString(value), message)
    return value


def dateOfBirth(value: Optional[str]) -> Optional[str]:
    if value is not None:
        dateString(value, "Date of birth must be in YYYY-MM-DD format")
        check(functions.isValidAge(value), "Age must be between 13 and 120 years")
    return value


def licenseExpiryDate(value: Optional[str]) -> Optional[str]:
    if value is not None:
        dateString(value, "License expiry date must be in YYYY-MM-DD format")
        check(
            functions.isFutureDate(value),
            "License expiry date must be in the future",
        )
    return value


def registrationNumber(value: Optional[str]) -> Optional[str]:
    if value is not None:
        check(
            functions.isRegistrationNumber(value),
            "Invalid registration number format. Expected format: XX00XX0000",
        )
    return value


def vehicleYear(value: Optional[int]) -> Optional[int]:
    if value is not None:
        check(
            functions.isVehicleYear(value),
            f"Invalid year. Must be between 1990 and {functions.today().year}",
        )
    return value


def vehicleCapacity(vehicleType: str, capacity: int) -> int:
    check(
        functions.isCapacityFor(vehicleType, capacity),
        f"Invalid capacity for vehicle type {vehicleType}",
    )
    return capacity


def coordinates(latitude: float, longitude: float) -> bool:
    return check(
        functions.isCoordinate(latitude, longitude),
        "Please provide valid latitude (-90 to 90) and longitude (-180 to 180) coordinates",
    )


def time(value: Optional[str], label: str) -> Optional[str]:
    if value is not None:
        check(
            functions.isTime(value),
            f"Please provide valid {label} time in HH:MM format",
        )
    return value


def workingDays(value: Optional[List[str]]) -> Optional[List[str]]:
    """Validate the weekday list and return it lowercased."""
    if value is None:
        return None
    check(
        functions.isWorkingDays(value),
        f"Please provide valid working days ({functions.enumStr(Day)})",
    )
    return [day.lower() for day in value]


def holidays(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is not None:
        check(
            all(functions.isDateString(day) for day in value),
            "Holidays must be a list of dates in YYYY-MM-DD format",
        )
    return value
