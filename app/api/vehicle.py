import json
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm.session import Session

from app.src.db import sessionMaker, Driver, Vehicle
from app.src import exceptions, validators, getters
from app.src.loggers import logEvent
from app.src.enums import VehicleType, VerificationStatus, DeleteType
from app.src.schemas import APIResponse, CamelModel, PaginatedResponse
from app.src.functions import (
    enumStr,
    isImageURLArray,
    isoNow,
    makeExceptionResponses,
    orderQuery,
    paginateQuery,
    sanitize,
    sanitizeFields,
    sanitizeLower,
    sanitizeRegistrationNumber,
    toBool,
    toNumber,
    updateIfChanged,
)

route_vehicle = APIRouter()


## Output Schema
class VehicleSchema(CamelModel):
    id: int
    driver_id: int
    vehicle_type: str
    registration_number: str
    make: str
    model: str
    year: int
    color: str
    capacity: int
    rc_image_url: str
    insurance_cert_url: str
    insurance_expiry_date: str
    puc_cert_url: Optional[str]
    puc_expiry_date: Optional[str]
    permit_image_url: Optional[str]
    permit_expiry_date: Optional[str]
    vehicle_image_urls: Optional[str]
    is_active: bool
    verification_status: str
    created_at: str
    updated_at: str


class VehicleResponse(APIResponse):
    data: VehicleSchema


class VehicleListResponse(PaginatedResponse):
    data: List[VehicleSchema]


## Input Forms
class CreateForm(CamelModel):
    driver_id: int
    vehicle_type: str = Field(description=enumStr(VehicleType))
    registration_number: str
    make: str
    model: str
    year: int
    color: str
    capacity: int
    rc_image_url: str
    insurance_cert_url: str
    insurance_expiry_date: str
    puc_cert_url: str | None = None
    puc_expiry_date: str | None = None
    permit_image_url: str | None = None
    permit_expiry_date: str | None = None
    vehicle_image_urls: str | List[str] | None = Field(
        default=None, description="JSON encoded array of image URLs"
    )


class UpdateForm(CamelModel):
    driver_id: int | None = None
    vehicle_type: str | None = Field(default=None, description=enumStr(VehicleType))
    registration_number: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    color: str | None = None
    capacity: int | None = None
    rc_image_url: str | None = None
    insurance_cert_url: str | None = None
    insurance_expiry_date: str | None = None
    puc_cert_url: str | None = None
    puc_expiry_date: str | None = None
    permit_image_url: str | None = None
    permit_expiry_date: str | None = None
    vehicle_image_urls: str | List[str] | None = Field(
        default=None, description="JSON encoded array of image URLs"
    )
    is_active: bool | None = None
    verification_status: str | None = Field(
        default=None, description=enumStr(VerificationStatus)
    )


## Query Parameters
class QueryParams(BaseModel):
    # filters
    vehicleType: str | None = Field(
        Query(default=None, description=enumStr(VehicleType))
    )
    verificationStatus: str | None = Field(
        Query(default=None, description=enumStr(VerificationStatus))
    )
    isActive: str | None = Field(Query(default=None))
    driverId: str | None = Field(Query(default=None))
    make: str | None = Field(Query(default=None))
    model: str | None = Field(Query(default=None))
    search: str | None = Field(Query(default=None))
    # year based
    yearFrom: str | None = Field(Query(default=None))
    yearTo: str | None = Field(Query(default=None))
    # created_at based
    createdAfter: str | None = Field(Query(default=None))
    createdBefore: str | None = Field(Query(default=None))
    # Ordering
    sortBy: str | None = Field(Query(default=None))
    sortOrder: str | None = Field(Query(default=None))
    # Pagination
    page: str | None = Field(Query(default=None))
    limit: str | None = Field(Query(default=None))


## Function
def validateForm(fParam: CreateForm | UpdateForm):
    if isinstance(fParam.vehicle_image_urls, list):
        fParam.vehicle_image_urls = json.dumps(fParam.vehicle_image_urls)
    sanitizeFields(fParam, sanitizeRegistrationNumber, [Vehicle.registration_number.key])
    sanitizeFields(fParam, sanitizeLower, [Vehicle.vehicle_type.key])
    sanitizeFields(
        fParam,
        sanitize,
        [
            Vehicle.make.key,
            Vehicle.model.key,
            Vehicle.color.key,
            Vehicle.rc_image_url.key,
            Vehicle.insurance_cert_url.key,
            Vehicle.insurance_expiry_date.key,
            Vehicle.puc_cert_url.key,
            Vehicle.puc_expiry_date.key,
            Vehicle.permit_image_url.key,
            Vehicle.permit_expiry_date.key,
            Vehicle.vehicle_image_urls.key,
        ],
    )

    if isinstance(fParam, CreateForm):
        validators.required(fParam.vehicle_type, "vehicleType")
        validators.required(fParam.registration_number, "registrationNumber")
        validators.required(fParam.make, "make")
        validators.required(fParam.model, "model")
        validators.required(fParam.color, "color")
        validators.required(fParam.rc_image_url, "rcImageUrl")
        validators.required(fParam.insurance_cert_url, "insuranceCertUrl")
        validators.required(fParam.insurance_expiry_date, "insuranceExpiryDate")
    else:
        sanitizeFields(fParam, sanitizeLower, [Vehicle.verification_status.key])
        validators.notNull(
            fParam,
            [
                Vehicle.driver_id.key,
                Vehicle.vehicle_type.key,
                Vehicle.registration_number.key,
                Vehicle.make.key,
                Vehicle.model.key,
                Vehicle.year.key,
                Vehicle.color.key,
                Vehicle.capacity.key,
                Vehicle.rc_image_url.key,
                Vehicle.insurance_cert_url.key,
                Vehicle.insurance_expiry_date.key,
                Vehicle.is_active.key,
                Vehicle.verification_status.key,
            ],
        )

    validators.enumMember(fParam.vehicle_type, VehicleType, "vehicle type")
    validators.registrationNumber(fParam.registration_number)
    validators.vehicleYear(fParam.year)
    # Capacity depends on the effective vehicle type and is checked by the caller
    validators.imageURL(fParam.rc_image_url, "Invalid RC image URL")
    validators.imageURL(fParam.insurance_cert_url, "Invalid insurance certificate URL")
    validators.dateString(
        fParam.insurance_expiry_date,
        "Insurance expiry date must be in YYYY-MM-DD format",
    )
    validators.imageURL(fParam.puc_cert_url, "Invalid PUC certificate URL")
    validators.dateString(
        fParam.puc_expiry_date, "PUC expiry date must be in YYYY-MM-DD format"
    )
    validators.imageURL(fParam.permit_image_url, "Invalid permit image URL")
    validators.dateString(
        fParam.permit_expiry_date, "Permit expiry date must be in YYYY-MM-DD format"
    )
    if fParam.vehicle_image_urls is not None:
        validators.check(
            isImageURLArray(fParam.vehicle_image_urls),
            "Invalid vehicle image URLs. Must be a valid JSON array of image URLs",
        )
    if isinstance(fParam, UpdateForm):
        validators.enumMember(
            fParam.verification_status, VerificationStatus, "verification status"
        )


def checkDriver(session: Session, driverID: int):
    driver = session.query(Driver.id).filter(Driver.id == driverID).first()
    if driver is None:
        raise exceptions.UnknownValue("Driver not found")


def checkConflicts(
    session: Session, registrationNumber: Optional[str], vehicleID: Optional[int] = None
):
    if registrationNumber is None:
        return
    query = session.query(Vehicle.id).filter(
        Vehicle.registration_number == registrationNumber
    )
    if vehicleID is not None:
        query = query.filter(Vehicle.id != vehicleID)
    if query.first() is not None:
        raise exceptions.UniqueViolation(
            "Vehicle with this registration number already exists"
        )


def getVehicle(session: Session, id: str) -> Vehicle:
    vehicleID = validators.numericID(id, "Invalid vehicle ID")
    vehicle = session.query(Vehicle).filter(Vehicle.id == vehicleID).first()
    if vehicle is None:
        raise exceptions.UnknownValue("Vehicle not found")
    return vehicle


def updateVehicle(vehicle: Vehicle, fParam: UpdateForm):
    updateIfChanged(
        vehicle,
        fParam,
        [
            Vehicle.driver_id.key,
            Vehicle.vehicle_type.key,
            Vehicle.registration_number.key,
            Vehicle.make.key,
            Vehicle.model.key,
            Vehicle.year.key,
            Vehicle.color.key,
            Vehicle.capacity.key,
            Vehicle.rc_image_url.key,
            Vehicle.insurance_cert_url.key,
            Vehicle.insurance_expiry_date.key,
            Vehicle.puc_cert_url.key,
            Vehicle.puc_expiry_date.key,
            Vehicle.permit_image_url.key,
            Vehicle.permit_expiry_date.key,
            Vehicle.vehicle_image_urls.key,
            Vehicle.is_active.key,
            Vehicle.verification_status.key,
        ],
    )
    vehicle.updated_at = isoNow()


def searchVehicle(session: Session, qParam: QueryParams):
    query = session.query(Vehicle)

    # Filters
    if qParam.vehicleType is not None:
        query = query.filter(Vehicle.vehicle_type == qParam.vehicleType)
    if qParam.verificationStatus is not None:
        query = query.filter(Vehicle.verification_status == qParam.verificationStatus)
    if qParam.isActive is not None:
        query = query.filter(Vehicle.is_active == toBool(qParam.isActive))
    driverID = toNumber(qParam.driverId)
    if driverID is not None:
        query = query.filter(Vehicle.driver_id == driverID)
    if qParam.make is not None:
        query = query.filter(Vehicle.make.ilike(f"%{qParam.make}%"))
    if qParam.model is not None:
        query = query.filter(Vehicle.model.ilike(f"%{qParam.model}%"))
    if qParam.search is not None:
        pattern = f"%{qParam.search}%"
        query = query.filter(
            or_(
                Vehicle.registration_number.ilike(pattern),
                Vehicle.make.ilike(pattern),
                Vehicle.model.ilike(pattern),
                Vehicle.color.ilike(pattern),
            )
        )
    # year based
    yearFrom = toNumber(qParam.yearFrom)
    if yearFrom is not None:
        query = query.filter(Vehicle.year >= yearFrom)
    yearTo = toNumber(qParam.yearTo)
    if yearTo is not None:
        query = query.filter(Vehicle.year <= yearTo)
    # created_at based
    if qParam.createdAfter is not None:
        query = query.filter(Vehicle.created_at >= qParam.createdAfter)
    if qParam.createdBefore is not None:
        query = query.filter(Vehicle.created_at <= qParam.createdBefore)

    # Ordering
    query = orderQuery(
        query,
        qParam.sortBy,
        qParam.sortOrder,
        {
            "createdAt": Vehicle.created_at,
            "updatedAt": Vehicle.updated_at,
            "registrationNumber": Vehicle.registration_number,
            "make": Vehicle.make,
            "model": Vehicle.model,
            "year": Vehicle.year,
            "verificationStatus": Vehicle.verification_status,
        },
        Vehicle.id,
    )

    # Pagination
    return paginateQuery(query, qParam.page, qParam.limit)


## API endpoints
@route_vehicle.post(
    "/create",
    tags=["Vehicle"],
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.MissingField,
            exceptions.InvalidValue,
            exceptions.ForeignKeyViolation,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
            exceptions.InternalError,
        ]
    ),
    description="""
    Registers a vehicle for an existing driver.
    The registration number is stored uppercased without spaces and must be unique.
    The capacity must fit the vehicle type (bike 1-2, auto 2-6, car 4-8, van 6-15, bus 10-60).
    The vehicle starts active with `pending` verification.
    Logs the vehicle creation activity with the request metadata.
    """,
)
async def create_vehicle(
    fParam: CreateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validateForm(fParam)
        validators.vehicleCapacity(fParam.vehicle_type, fParam.capacity)
        checkDriver(session, fParam.driver_id)
        checkConflicts(session, fParam.registration_number)

        timestamp = isoNow()
        vehicle = Vehicle(
            driver_id=fParam.driver_id,
            vehicle_type=fParam.vehicle_type,
            registration_number=fParam.registration_number,
            make=fParam.make,
            model=fParam.model,
            year=fParam.year,
            color=fParam.color,
            capacity=fParam.capacity,
            rc_image_url=fParam.rc_image_url,
            insurance_cert_url=fParam.insurance_cert_url,
            insurance_expiry_date=fParam.insurance_expiry_date,
            puc_cert_url=fParam.puc_cert_url,
            puc_expiry_date=fParam.puc_expiry_date,
            permit_image_url=fParam.permit_image_url,
            permit_expiry_date=fParam.permit_expiry_date,
            vehicle_image_urls=fParam.vehicle_image_urls,
            is_active=True,
            verification_status=VerificationStatus.PENDING.value,
            created_at=timestamp,
            updated_at=timestamp,
        )
        session.add(vehicle)
        session.commit()
        session.refresh(vehicle)

        vehicleData = VehicleSchema.model_validate(vehicle)
        logEvent(request_info, jsonable_encoder(vehicleData))
        return VehicleResponse(message="Vehicle created successfully", data=vehicleData)
    except Exception as e:
        exceptions.handle(
            e,
            uniqueMessage="Vehicle with this registration number already exists",
            foreignKeyMessage="Invalid driver ID",
        )
    finally:
        session.close()


@route_vehicle.get(
    "/get-all",
    tags=["Vehicle"],
    response_model=VehicleListResponse,
    responses=makeExceptionResponses([exceptions.InternalError]),
    description="""
    Fetches a paginated list of vehicles.
    Supports filtering by type, verification status, activity, driver, make, model,
    manufacturing year range and creation date.
    `search` matches registration number, make, model and color.
    """,
)
async def fetch_vehicles(qParam: QueryParams = Depends()):
    session = sessionMaker()
    try:
        vehicles, pagination = searchVehicle(session, qParam)
        return VehicleListResponse(
            message="Vehicles retrieved successfully",
            data=[VehicleSchema.model_validate(vehicle) for vehicle in vehicles],
            pagination=pagination,
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_vehicle.get(
    "/get/{id}",
    tags=["Vehicle"],
    response_model=VehicleResponse,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.UnknownValue]
    ),
    description="""
    Fetches a single vehicle by ID.
    """,
)
async def fetch_vehicle(id: str):
    session = sessionMaker()
    try:
        vehicle = getVehicle(session, id)
        return VehicleResponse(
            message="Vehicle retrieved successfully",
            data=VehicleSchema.model_validate(vehicle),
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_vehicle.patch(
    "/update/{id}",
    tags=["Vehicle"],
    response_model=VehicleResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidValue,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Partially updates an existing vehicle.
    The vehicle can be moved to another existing driver.
    The capacity is re-checked against the vehicle type whenever either of them changes.
    Logs the vehicle updating activity with the request metadata.
    """,
)
async def update_vehicle(
    id: str,
    fParam: UpdateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        vehicle = getVehicle(session, id)
        validateForm(fParam)
        if fParam.vehicle_type is not None or fParam.capacity is not None:
            validators.vehicleCapacity(
                fParam.vehicle_type or vehicle.vehicle_type,
                fParam.capacity if fParam.capacity is not None else vehicle.capacity,
            )
        if fParam.driver_id is not None:
            checkDriver(session, fParam.driver_id)
        checkConflicts(session, fParam.registration_number, vehicle.id)

        updateVehicle(vehicle, fParam)
        session.commit()
        session.refresh(vehicle)

        vehicleData = VehicleSchema.model_validate(vehicle)
        logEvent(request_info, jsonable_encoder(vehicleData))
        return VehicleResponse(message="Vehicle updated successfully", data=vehicleData)
    except Exception as e:
        exceptions.handle(
            e,
            uniqueMessage="Vehicle with this registration number already exists",
            foreignKeyMessage="Invalid driver ID",
        )
    finally:
        session.close()


@route_vehicle.delete(
    "/delete/{id}/{deleteType}",
    tags=["Vehicle"],
    response_model=VehicleResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidDeleteType,
            exceptions.UnknownValue,
        ]
    ),
    description="""
    Deletes an existing vehicle.
    `soft` marks the vehicle inactive and can be repeated safely.
    `hard` permanently removes the vehicle.
    Logs the deletion activity with the request metadata.
    """,
)
async def delete_vehicle(
    id: str,
    deleteType: str,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        mode = validators.deleteType(deleteType)
        vehicle = getVehicle(session, id)

        if mode == DeleteType.SOFT:
            vehicle.is_active = False
            vehicle.updated_at = isoNow()
            session.commit()
            session.refresh(vehicle)
            vehicleData = VehicleSchema.model_validate(vehicle)
        else:
            vehicleData = VehicleSchema.model_validate(vehicle)
            session.delete(vehicle)
            session.commit()

        logEvent(request_info, jsonable_encoder(vehicleData))
        return VehicleResponse(
            message=f"Vehicle {mode.value} deleted successfully", data=vehicleData
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
