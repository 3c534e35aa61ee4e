import json, math, re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type
from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from sqlalchemy import Column
from sqlalchemy.orm import Query

from app.src import schemas
from app.src.exceptions import APIException
from app.src.enums import Day, OrderIn
from app.src.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
    MAX_DRIVER_RATING,
    MAX_LICENSE_LENGTH,
    MAX_USER_AGE,
    MIN_DRIVER_RATING,
    MIN_LICENSE_LENGTH,
    MIN_USER_AGE,
    MIN_VEHICLE_YEAR,
    REGEX_AADHAR,
    REGEX_DATE,
    REGEX_EMAIL,
    REGEX_IFSC,
    REGEX_PAN,
    REGEX_PERSON_NAME,
    REGEX_PHONE,
    REGEX_PINCODE,
    REGEX_REGISTRATION_NUMBER,
    REGEX_SCHOOL_CODE,
    REGEX_SCHOOL_NAME,
    REGEX_TIME,
    REGEX_UPI,
    TMZ_PRIMARY,
    VEHICLE_CAPACITY,
)

httpUrlAdapter = TypeAdapter(HttpUrl)


# ---------------------------------------------------------------------------
# OpenAPI helpers
# ---------------------------------------------------------------------------
def makeExceptionResponses(exceptions: List[Type[APIException]]) -> Dict[int, dict]:
    """
    Generate OpenAPI response documentation from a list of APIException classes.

    Exceptions sharing a status code are fused into one response entry with
    an example per exception.

    Args:
        exceptions (List[Type[APIException]]): Exception classes raised by the endpoint.

    Returns:
        Dict[int, dict]: A dictionary of OpenAPI response specs grouped by status code.
    """
    responses = {}

    for exception in exceptions:
        status_code = exception.status_code
        example_key = exception.__name__
        example_value = {
            "summary": str(exception.headers),
            "value": {"success": False, "message": exception.detail},
        }

        if status_code not in responses:
            responses[status_code] = {
                "model": schemas.ErrorResponse,
                "content": {
                    "application/json": {"examples": {example_key: example_value}}
                },
            }
        else:
            responses[status_code]["content"]["application/json"]["examples"][
                example_key
            ] = example_value

    return responses


def enumStr(enumClass: Type[Enum]) -> str:
    """
    Convert an Enum class into a comma-separated string of its values.

    Example:
        >>> enumStr(VehicleType)
        'auto, car, bike, bus, van'
    """
    return ", ".join(str(x.value) for x in enumClass)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------
def isoNow() -> str:
    """
    Current UTC time as an ISO-8601 string with millisecond precision.

    Example:
        >>> isoNow()
        '2026-10-18T09:15:02.123Z'
    """
    now = datetime.now(TMZ_PRIMARY).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


def today() -> date:
    return datetime.now(TMZ_PRIMARY).date()


# ---------------------------------------------------------------------------
# Sanitizers
# ---------------------------------------------------------------------------
def sanitize(value: Optional[str]) -> Optional[str]:
    """Trim the value and collapse internal whitespace runs to a single space."""
    if value is None:
        return None
    return " ".join(value.split())


def sanitizeUpper(value: Optional[str]) -> Optional[str]:
    value = sanitize(value)
    return value.upper() if value is not None else None


def sanitizeLower(value: Optional[str]) -> Optional[str]:
    value = sanitize(value)
    return value.lower() if value is not None else None


def sanitizeRegistrationNumber(value: Optional[str]) -> Optional[str]:
    """Uppercase the value and drop every whitespace character (`MH 12 AB 1234` -> `MH12AB1234`)."""
    if value is None:
        return None
    return "".join(value.split()).upper()


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------
def matches(pattern: str, value: Any) -> bool:
    return isinstance(value, str) and re.fullmatch(pattern, value) is not None


def isEmail(value: str) -> bool:
    return matches(REGEX_EMAIL, value)


def isPhone(value: str) -> bool:
    return matches(REGEX_PHONE, value)


def isPAN(value: str) -> bool:
    return matches(REGEX_PAN, value)


def isAadhar(value: str) -> bool:
    return matches(REGEX_AADHAR, value)


def isIFSC(value: str) -> bool:
    return matches(REGEX_IFSC, value)


def isUPI(value: str) -> bool:
    return matches(REGEX_UPI, value)


def isPersonName(value: str) -> bool:
    return matches(REGEX_PERSON_NAME, value)


def isRegistrationNumber(value: str) -> bool:
    return matches(REGEX_REGISTRATION_NUMBER, value)


def isPincode(value: str) -> bool:
    return matches(REGEX_PINCODE, value)


def isTime(value: str) -> bool:
    return matches(REGEX_TIME, value)


def isSchoolName(value: str) -> bool:
    return matches(REGEX_SCHOOL_NAME, value)


def isSchoolCode(value: str) -> bool:
    return matches(REGEX_SCHOOL_CODE, value)


def isLicenseNumber(value: str) -> bool:
    return isinstance(value, str) and (
        MIN_LICENSE_LENGTH <= len(value) <= MAX_LICENSE_LENGTH
    )


def isImageURL(value: str) -> bool:
    """Check whether the value is an absolute http(s) URL with a host."""
    if not isinstance(value, str):
        return False
    try:
        url = httpUrlAdapter.validate_python(value)
    except ValidationError:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def isImageURLArray(value: str) -> bool:
    """Check whether the value is JSON text holding an array of image URLs."""
    try:
        urls = json.loads(value)
    except (TypeError, ValueError):
        return False
    return isinstance(urls, list) and all(isImageURL(url) for url in urls)


def toDate(value: str) -> Optional[date]:
    """Parse a `YYYY-MM-DD` string into a date, None when it is not a real calendar date."""
    if not matches(REGEX_DATE, value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def isDateString(value: str) -> bool:
    return toDate(value) is not None


def isFutureDate(value: str) -> bool:
    parsed = toDate(value)
    return parsed is not None and parsed > today()


def isValidAge(dateOfBirth: str) -> bool:
    """
    Check whether a person born on `dateOfBirth` is between 13 and 120 years old.

    The age is counted in completed years as of today.
    """
    born = toDate(dateOfBirth)
    if born is None:
        return False
    current = today()
    age = current.year - born.year
    if (current.month, current.day) < (born.month, born.day):
        age -= 1
    return MIN_USER_AGE <= age <= MAX_USER_AGE


def isVehicleYear(year: int) -> bool:
    return MIN_VEHICLE_YEAR <= year <= today().year


def isCapacityFor(vehicleType: str, capacity: int) -> bool:
    limits = VEHICLE_CAPACITY.get(vehicleType)
    if limits is None:
        return False
    return limits[0] <= capacity <= limits[1]


def isRating(rating: float) -> bool:
    return MIN_DRIVER_RATING <= rating <= MAX_DRIVER_RATING


def isWorkingDays(days: List[str]) -> bool:
    """Check for a non-empty list of weekday names, compared case-insensitively."""
    weekdays = {day.value for day in Day}
    return (
        isinstance(days, list)
        and len(days) > 0
        and all(isinstance(day, str) and day.lower() in weekdays for day in days)
    )


def isSRID4326(wktGeom: BaseGeometry) -> bool:
    """
    Validate whether a Shapely geometry uses coordinates consistent with SRID 4326 (WGS84).

    SRID 4326 (WGS84) represents geographic coordinates where:
      - Latitude must be within [-90, 90].
      - Longitude must be within [-180, 180].

    Args:
        wktGeom (BaseGeometry): A Shapely geometry.

    Returns:
        bool: True if all coordinates fall within valid latitude/longitude ranges,
        otherwise False.

    Example:
        >>> from shapely.geometry import Point
        >>> isSRID4326(Point(77.5946, 12.9716))
        True
        >>> isSRID4326(Point(200, 95))  # invalid lat/lon
        False
    """

    def check_coords(coords):
        for longitude, latitude in coords:
            if not (-90 <= latitude <= 90) or not (-180 <= longitude <= 180):
                return False
        return True

    if hasattr(wktGeom, "exterior"):
        if not check_coords(wktGeom.exterior.coords):
            return False
    elif hasattr(wktGeom, "coords"):
        if not check_coords(wktGeom.coords):
            return False

    # Multi* geometries (recursive check)
    if hasattr(wktGeom, "geoms"):
        for geom in wktGeom.geoms:
            if not isSRID4326(geom):
                return False

    return True


def isCoordinate(latitude: float, longitude: float) -> bool:
    if not all(math.isfinite(x) for x in (latitude, longitude)):
        return False
    return isSRID4326(Point(longitude, latitude))


# ---------------------------------------------------------------------------
# Query parameter parsing
# ---------------------------------------------------------------------------
def toNumber(value: Optional[str]) -> Optional[float]:
    """Parse a query value as a finite number, None when it is absent or unparseable."""
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def toBool(value: Optional[str]) -> Optional[bool]:
    """`"true"` maps to True, any other present value to False."""
    if value is None:
        return None
    return value == "true"


def getPagination(page: Optional[str], limit: Optional[str]) -> Tuple[int, int]:
    """
    Resolve the page number and page size of a listing request.

    Unparseable values fall back to the defaults. The page is clamped to
    [1, MAX_PAGE] and the page size to [1, 100].
    """
    pageNumber = toNumber(page)
    pageNumber = (
        DEFAULT_PAGE
        if pageNumber is None
        else min(MAX_PAGE, max(1, int(pageNumber)))
    )
    pageSize = toNumber(limit)
    pageSize = (
        DEFAULT_PAGE_SIZE
        if pageSize is None
        else min(MAX_PAGE_SIZE, max(1, int(pageSize)))
    )
    return pageNumber, pageSize


def makePagination(page: int, limit: int, total: int) -> schemas.Pagination:
    totalPages = math.ceil(total / limit)
    return schemas.Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=totalPages,
        has_next=page < totalPages,
        has_prev=page > 1,
    )


def orderQuery(
    query: Query,
    sortBy: Optional[str],
    sortOrder: Optional[str],
    columns: Dict[str, Column],
    tieBreaker: Column,
) -> Query:
    """
    Order a query by a whitelisted column.

    Unknown `sortBy` values fall back to `createdAt`. Rows sharing the sort
    key are ordered by `tieBreaker` in the same direction.
    """
    orderingAttribute = columns.get(sortBy, columns["createdAt"])
    if sortOrder == OrderIn.ASC:
        return query.order_by(orderingAttribute.asc(), tieBreaker.asc())
    return query.order_by(orderingAttribute.desc(), tieBreaker.desc())


def paginateQuery(
    query: Query, page: Optional[str], limit: Optional[str]
) -> Tuple[list, schemas.Pagination]:
    """Apply offset/limit to an already filtered and ordered query."""
    pageNumber, pageSize = getPagination(page, limit)
    total = query.order_by(None).count()
    rows = query.offset((pageNumber - 1) * pageSize).limit(pageSize).all()
    return rows, makePagination(pageNumber, pageSize, total)


# ---------------------------------------------------------------------------
# Request forms
# ---------------------------------------------------------------------------
def sanitizeFields(fParam: BaseModel, sanitizer, fields: List[str]) -> None:
    """
    Run a sanitizer over the given string fields of a request model.

    Fields that were not provided are left untouched. A value that is empty
    after sanitation becomes None.
    """
    for field in fields:
        value = getattr(fParam, field)
        if value is not None:
            setattr(fParam, field, sanitizer(value) or None)


def updateIfChanged(targetObj, sourceObj: BaseModel, fields: List[str]) -> None:
    """
    Copy the given fields from a request model onto an ORM object.

    Only fields the client actually sent are considered, so an explicit
    `null` clears the column while an absent key leaves it untouched.
    Field names of the request model match the column keys.

    Example:
        >>> updateIfChanged(
        ...     vehicle,
        ...     fParam,
        ...     [Vehicle.make.key, Vehicle.model.key, Vehicle.color.key],
        ... )
    """
    for field in fields:
        if field not in sourceObj.model_fields_set:
            continue
        new_value = getattr(sourceObj, field)
        if isinstance(new_value, Enum):
            new_value = new_value.value
        if getattr(targetObj, field) != new_value:
            setattr(targetObj, field, new_value)
