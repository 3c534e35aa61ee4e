import math
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm.session import Session

from app.src.db import sessionMaker, Driver, User
from app.src import exceptions, validators, getters
from app.src.loggers import logEvent
from app.src.enums import BackgroundCheckStatus, DriverStatus, DeleteType
from app.src.schemas import APIResponse, CamelModel, PaginatedResponse
from app.src.functions import (
    enumStr,
    isoNow,
    isAadhar,
    isIFSC,
    isLicenseNumber,
    isPAN,
    isRating,
    isUPI,
    makeExceptionResponses,
    orderQuery,
    paginateQuery,
    sanitize,
    sanitizeFields,
    sanitizeLower,
    sanitizeUpper,
    toBool,
    toNumber,
    updateIfChanged,
)

route_driver = APIRouter()


## Output Schema
class DriverSchema(CamelModel):
    id: int
    user_uuid: str = Field(alias="user_uuid")
    license_number: str
    license_expiry_date: str
    license_image_url: str
    aadhar_number: str
    aadhar_image_url: str
    pan_number: Optional[str]
    pan_image_url: Optional[str]
    police_verification_cert_url: Optional[str]
    background_check_status: str
    emergency_contact_name: str
    emergency_contact_phone: str
    bank_account_number: Optional[str]
    bank_ifsc_code: Optional[str]
    bank_account_holder_name: Optional[str]
    upi_id: Optional[str]
    status: str
    approved_at: Optional[str]
    rejected_at: Optional[str]
    rejection_reason: Optional[str]
    rating: Optional[float]
    total_rides: int
    total_earnings: float
    is_online: bool
    last_online_at: Optional[str]
    is_active: bool
    created_at: str
    updated_at: str


class DriverResponse(APIResponse):
    data: DriverSchema


class DriverListResponse(PaginatedResponse):
    data: List[DriverSchema]


## Input Forms
class UpdateForm(CamelModel):
    license_number: str | None = None
    license_expiry_date: str | None = None
    license_image_url: str | None = None
    aadhar_number: str | None = None
    aadhar_image_url: str | None = None
    pan_number: str | None = None
    pan_image_url: str | None = None
    police_verification_cert_url: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    bank_account_number: str | None = None
    bank_ifsc_code: str | None = None
    bank_account_holder_name: str | None = None
    upi_id: str | None = None
    background_check_status: str | None = Field(
        default=None, description=enumStr(BackgroundCheckStatus)
    )
    status: str | None = Field(default=None, description=enumStr(DriverStatus))
    rejection_reason: str | None = None
    rating: float | None = None
    total_rides: int | None = None
    total_earnings: float | None = None
    is_online: bool | None = None
    is_active: bool | None = None


class CreateForm(CamelModel):
    user_uuid: str = Field(alias="user_uuid")
    license_number: str
    license_expiry_date: str
    license_image_url: str
    aadhar_number: str
    aadhar_image_url: str
    pan_number: str | None = None
    pan_image_url: str | None = None
    police_verification_cert_url: str | None = None
    emergency_contact_name: str
    emergency_contact_phone: str
    bank_account_number: str | None = None
    bank_ifsc_code: str | None = None
    bank_account_holder_name: str | None = None
    upi_id: str | None = None


## Query Parameters
class QueryParams(BaseModel):
    # filters
    status: str | None = Field(Query(default=None, description=enumStr(DriverStatus)))
    backgroundCheckStatus: str | None = Field(
        Query(default=None, description=enumStr(BackgroundCheckStatus))
    )
    isOnline: str | None = Field(Query(default=None))
    isActive: str | None = Field(Query(default=None))
    search: str | None = Field(Query(default=None))
    # rating based
    rating: str | None = Field(Query(default=None, description="Minimum rating"))
    # total_rides based
    totalRidesFrom: str | None = Field(Query(default=None))
    totalRidesTo: str | None = Field(Query(default=None))
    # total_earnings based
    totalEarningsFrom: str | None = Field(Query(default=None))
    totalEarningsTo: str | None = Field(Query(default=None))
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
    sanitizeFields(
        fParam,
        sanitizeUpper,
        [Driver.license_number.key, Driver.pan_number.key, Driver.bank_ifsc_code.key],
    )
    sanitizeFields(fParam, sanitizeLower, [Driver.upi_id.key])
    sanitizeFields(
        fParam,
        sanitize,
        [
            Driver.license_expiry_date.key,
            Driver.license_image_url.key,
            Driver.aadhar_number.key,
            Driver.aadhar_image_url.key,
            Driver.pan_image_url.key,
            Driver.police_verification_cert_url.key,
            Driver.emergency_contact_name.key,
            Driver.emergency_contact_phone.key,
            Driver.bank_account_number.key,
            Driver.bank_account_holder_name.key,
        ],
    )

    if isinstance(fParam, CreateForm):
        sanitizeFields(fParam, sanitize, [Driver.user_uuid.key])
        validators.required(fParam.user_uuid, "user_uuid")
        validators.required(fParam.license_number, "licenseNumber")
        validators.required(fParam.license_expiry_date, "licenseExpiryDate")
        validators.required(fParam.license_image_url, "licenseImageUrl")
        validators.required(fParam.aadhar_number, "aadharNumber")
        validators.required(fParam.aadhar_image_url, "aadharImageUrl")
        validators.required(fParam.emergency_contact_name, "emergencyContactName")
        validators.required(fParam.emergency_contact_phone, "emergencyContactPhone")
    else:
        sanitizeFields(fParam, sanitize, [Driver.rejection_reason.key])
        sanitizeFields(
            fParam,
            sanitizeLower,
            [Driver.background_check_status.key, Driver.status.key],
        )
        validators.notNull(
            fParam,
            [
                Driver.license_number.key,
                Driver.license_expiry_date.key,
                Driver.license_image_url.key,
                Driver.aadhar_number.key,
                Driver.aadhar_image_url.key,
                Driver.emergency_contact_name.key,
                Driver.emergency_contact_phone.key,
                Driver.background_check_status.key,
                Driver.status.key,
                Driver.rating.key,
                Driver.total_rides.key,
                Driver.total_earnings.key,
                Driver.is_online.key,
                Driver.is_active.key,
            ],
        )

    if fParam.license_number is not None:
        validators.check(
            isLicenseNumber(fParam.license_number), "Invalid license number format"
        )
    validators.licenseExpiryDate(fParam.license_expiry_date)
    validators.imageURL(fParam.license_image_url, "Invalid license image URL")
    if fParam.aadhar_number is not None:
        validators.check(
            isAadhar(fParam.aadhar_number), "Aadhar number must be 12 digits"
        )
    validators.imageURL(fParam.aadhar_image_url, "Invalid Aadhar image URL")
    if fParam.pan_number is not None:
        validators.check(isPAN(fParam.pan_number), "Invalid PAN number format")
    validators.imageURL(fParam.pan_image_url, "Invalid PAN image URL")
    validators.imageURL(
        fParam.police_verification_cert_url,
        "Invalid police verification certificate URL",
    )
    validators.phone(
        fParam.emergency_contact_phone, "Invalid emergency contact phone number"
    )
    if fParam.bank_ifsc_code is not None:
        validators.check(isIFSC(fParam.bank_ifsc_code), "Invalid IFSC code format")
    if fParam.upi_id is not None:
        validators.check(isUPI(fParam.upi_id), "Invalid UPI ID format")

    if isinstance(fParam, UpdateForm):
        validators.enumMember(
            fParam.background_check_status,
            BackgroundCheckStatus,
            "background check status",
        )
        validators.enumMember(fParam.status, DriverStatus, "status")
        if fParam.rating is not None:
            validators.check(isRating(fParam.rating), "Rating must be between 0 and 5")
        if fParam.total_rides is not None:
            validators.check(
                fParam.total_rides >= 0, "Total rides cannot be negative"
            )
        if fParam.total_earnings is not None:
            validators.check(
                math.isfinite(fParam.total_earnings),
                "Total earnings must be a finite number",
            )
            validators.check(
                fParam.total_earnings >= 0, "Total earnings cannot be negative"
            )


def checkConflicts(
    session: Session, fParam: CreateForm | UpdateForm, driverID: Optional[int] = None
):
    uniqueColumns = [
        (Driver.license_number, fParam.license_number, "License number"),
        (Driver.aadhar_number, fParam.aadhar_number, "Aadhar number"),
        (Driver.pan_number, fParam.pan_number, "PAN number"),
    ]
    for column, value, label in uniqueColumns:
        if value is None:
            continue
        query = session.query(Driver.id).filter(column == value)
        if driverID is not None:
            query = query.filter(Driver.id != driverID)
        if query.first() is not None:
            raise exceptions.UniqueViolation(f"{label} already exists")


def getDriver(session: Session, uuid: str) -> Driver:
    validators.uuidString(uuid, "Invalid user uuid")
    driver = session.query(Driver).filter(Driver.user_uuid == uuid).first()
    if driver is None:
        raise exceptions.UnknownValue("Driver not found")
    return driver


def updateDriver(driver: Driver, fParam: UpdateForm, timestamp: str):
    previousStatus = driver.status
    previousOnline = driver.is_online
    updateIfChanged(
        driver,
        fParam,
        [
            Driver.license_number.key,
            Driver.license_expiry_date.key,
            Driver.license_image_url.key,
            Driver.aadhar_number.key,
            Driver.aadhar_image_url.key,
            Driver.pan_number.key,
            Driver.pan_image_url.key,
            Driver.police_verification_cert_url.key,
            Driver.emergency_contact_name.key,
            Driver.emergency_contact_phone.key,
            Driver.bank_account_number.key,
            Driver.bank_ifsc_code.key,
            Driver.bank_account_holder_name.key,
            Driver.upi_id.key,
            Driver.background_check_status.key,
            Driver.status.key,
            Driver.rejection_reason.key,
            Driver.rating.key,
            Driver.total_rides.key,
            Driver.total_earnings.key,
            Driver.is_online.key,
            Driver.is_active.key,
        ],
    )

    # Side effects apply only when the value actually changes
    if driver.status != previousStatus:
        if driver.status == DriverStatus.APPROVED:
            driver.approved_at = timestamp
            driver.rejected_at = None
            driver.rejection_reason = None
        elif driver.status == DriverStatus.REJECTED:
            driver.rejected_at = timestamp
            driver.approved_at = None
    if driver.is_online != previousOnline:
        driver.last_online_at = timestamp
    driver.updated_at = timestamp


def searchDriver(session: Session, qParam: QueryParams):
    query = session.query(Driver)

    # Filters
    if qParam.status is not None:
        query = query.filter(Driver.status == qParam.status)
    if qParam.backgroundCheckStatus is not None:
        query = query.filter(
            Driver.background_check_status == qParam.backgroundCheckStatus
        )
    if qParam.isOnline is not None:
        query = query.filter(Driver.is_online == toBool(qParam.isOnline))
    if qParam.isActive is not None:
        query = query.filter(Driver.is_active == toBool(qParam.isActive))
    if qParam.search is not None:
        pattern = f"%{qParam.search}%"
        query = query.filter(
            or_(
                Driver.license_number.ilike(pattern),
                Driver.aadhar_number.ilike(pattern),
                Driver.pan_number.ilike(pattern),
                Driver.emergency_contact_name.ilike(pattern),
                Driver.emergency_contact_phone.ilike(pattern),
                Driver.bank_account_number.ilike(pattern),
                Driver.upi_id.ilike(pattern),
            )
        )
    # rating based
    rating = toNumber(qParam.rating)
    if rating is not None:
        query = query.filter(Driver.rating >= rating)
    # total_rides based
    totalRidesFrom = toNumber(qParam.totalRidesFrom)
    if totalRidesFrom is not None:
        query = query.filter(Driver.total_rides >= totalRidesFrom)
    totalRidesTo = toNumber(qParam.totalRidesTo)
    if totalRidesTo is not None:
        query = query.filter(Driver.total_rides <= totalRidesTo)
    # total_earnings based
    totalEarningsFrom = toNumber(qParam.totalEarningsFrom)
    if totalEarningsFrom is not None:
        query = query.filter(Driver.total_earnings >= totalEarningsFrom)
    totalEarningsTo = toNumber(qParam.totalEarningsTo)
    if totalEarningsTo is not None:
        query = query.filter(Driver.total_earnings <= totalEarningsTo)
    # created_at based
    if qParam.createdAfter is not None:
        query = query.filter(Driver.created_at >= qParam.createdAfter)
    if qParam.createdBefore is not None:
        query = query.filter(Driver.created_at <= qParam.createdBefore)

    # Ordering
    query = orderQuery(
        query,
        qParam.sortBy,
        qParam.sortOrder,
        {
            "createdAt": Driver.created_at,
            "updatedAt": Driver.updated_at,
            "rating": Driver.rating,
            "totalRides": Driver.total_rides,
            "totalEarnings": Driver.total_earnings,
            "status": Driver.status,
            "licenseNumber": Driver.license_number,
        },
        Driver.id,
    )

    # Pagination
    return paginateQuery(query, qParam.page, qParam.limit)


## API endpoints
@route_driver.post(
    "/create",
    tags=["Driver"],
    response_model=DriverResponse,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.MissingField,
            exceptions.InvalidValue,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
            exceptions.InternalError,
        ]
    ),
    description="""
    Creates the driver profile of an existing user.
    A user can own only one driver profile.
    License, Aadhar and PAN numbers must be unique across drivers.
    The profile starts in `pending` status with zeroed counters.
    Logs the driver creation activity with the request metadata.
    """,
)
async def create_driver(
    fParam: CreateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validateForm(fParam)

        user = session.query(User.id).filter(User.uuid == fParam.user_uuid).first()
        if user is None:
            raise exceptions.UnknownValue("User not found")
        profile = (
            session.query(Driver.id)
            .filter(Driver.user_uuid == fParam.user_uuid)
            .first()
        )
        if profile is not None:
            raise exceptions.UniqueViolation(
                "Driver profile already exists for this user"
            )
        checkConflicts(session, fParam)

        timestamp = isoNow()
        driver = Driver(
            user_uuid=fParam.user_uuid,
            license_number=fParam.license_number,
            license_expiry_date=fParam.license_expiry_date,
            license_image_url=fParam.license_image_url,
            aadhar_number=fParam.aadhar_number,
            aadhar_image_url=fParam.aadhar_image_url,
            pan_number=fParam.pan_number,
            pan_image_url=fParam.pan_image_url,
            police_verification_cert_url=fParam.police_verification_cert_url,
            background_check_status=BackgroundCheckStatus.PENDING.value,
            emergency_contact_name=fParam.emergency_contact_name,
            emergency_contact_phone=fParam.emergency_contact_phone,
            bank_account_number=fParam.bank_account_number,
            bank_ifsc_code=fParam.bank_ifsc_code,
            bank_account_holder_name=fParam.bank_account_holder_name,
            upi_id=fParam.upi_id,
            status=DriverStatus.PENDING.value,
            rating=0,
            total_rides=0,
            total_earnings=0,
            is_online=False,
            is_active=True,
            created_at=timestamp,
            updated_at=timestamp,
        )
        session.add(driver)
        session.commit()
        session.refresh(driver)

        driverData = DriverSchema.model_validate(driver)
        logEvent(request_info, jsonable_encoder(driverData))
        return DriverResponse(
            message="Driver profile created successfully", data=driverData
        )
    except Exception as e:
        exceptions.handle(
            e,
            uniqueMessage="Duplicate data found. Please check license number, Aadhar number, or PAN number.",
            foreignKeyMessage="Invalid user uuid",
        )
    finally:
        session.close()


@route_driver.get(
    "/get-all",
    tags=["Driver"],
    response_model=DriverListResponse,
    responses=makeExceptionResponses([exceptions.InternalError]),
    description="""
    Fetches a paginated list of drivers.
    Supports filtering by status, background check status, online and active flags,
    minimum rating, ride and earning ranges and creation date.
    `search` matches license, Aadhar and PAN numbers, emergency contact, bank account and UPI ID.
    """,
)
async def fetch_drivers(qParam: QueryParams = Depends()):
    session = sessionMaker()
    try:
        drivers, pagination = searchDriver(session, qParam)
        return DriverListResponse(
            message="Drivers retrieved successfully",
            data=[DriverSchema.model_validate(driver) for driver in drivers],
            pagination=pagination,
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_driver.get(
    "/get/{uuid}",
    tags=["Driver"],
    response_model=DriverResponse,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.UnknownValue]
    ),
    description="""
    Fetches the driver profile of the user with the given UUID.
    """,
)
async def fetch_driver(uuid: str):
    session = sessionMaker()
    try:
        driver = getDriver(session, uuid)
        return DriverResponse(
            message="Driver retrieved successfully",
            data=DriverSchema.model_validate(driver),
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_driver.patch(
    "/update/{uuid}",
    tags=["Driver"],
    response_model=DriverResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidValue,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Partially updates the driver profile of the user with the given UUID.
    Moving into `approved` stamps `approvedAt` and clears the rejection details.
    Moving into `rejected` stamps `rejectedAt` and clears `approvedAt`.
    Changing `isOnline` stamps `lastOnlineAt`.
    Logs the driver updating activity with the request metadata.
    """,
)
async def update_driver(
    uuid: str,
    fParam: UpdateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        driver = getDriver(session, uuid)
        validateForm(fParam)
        checkConflicts(session, fParam, driver.id)

        updateDriver(driver, fParam, isoNow())
        session.commit()
        session.refresh(driver)

        driverData = DriverSchema.model_validate(driver)
        logEvent(request_info, jsonable_encoder(driverData))
        return DriverResponse(message="Driver updated successfully", data=driverData)
    except Exception as e:
        exceptions.handle(
            e,
            uniqueMessage="Duplicate data found. Please check license number, Aadhar number, or PAN number.",
        )
    finally:
        session.close()


@route_driver.delete(
    "/delete/{uuid}/{mode}",
    tags=["Driver"],
    response_model=DriverResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidDeleteType,
            exceptions.UnknownValue,
        ]
    ),
    description="""
    Deletes the driver profile of the user with the given UUID.
    `soft` deactivates the profile, takes the driver offline and sets the status to `inactive`.
    `hard` permanently removes the profile together with its vehicles.
    Logs the deletion activity with the request metadata.
    """,
)
async def delete_driver(
    uuid: str,
    mode: str,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        deleteType = validators.deleteType(mode)
        driver = getDriver(session, uuid)

        if deleteType == DeleteType.SOFT:
            timestamp = isoNow()
            if driver.is_online:
                driver.last_online_at = timestamp
            driver.is_active = False
            driver.is_online = False
            driver.status = DriverStatus.INACTIVE.value
            driver.updated_at = timestamp
            session.commit()
            session.refresh(driver)
            driverData = DriverSchema.model_validate(driver)
        else:
            driverData = DriverSchema.model_validate(driver)
            session.delete(driver)
            session.commit()

        logEvent(request_info, jsonable_encoder(driverData))
        return DriverResponse(
            message=f"Driver {deleteType.value} deleted successfully", data=driverData
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
