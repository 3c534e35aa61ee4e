import json
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, or_
from sqlalchemy.orm.session import Session

from app.src.db import sessionMaker, School
from app.src import exceptions, validators, getters
from app.src.loggers import logEvent
from app.src.enums import BoardType, Day, SchoolType, DeleteType
from app.src.schemas import APIResponse, CamelModel, PaginatedResponse
from app.src.functions import (
    enumStr,
    isPincode,
    isSchoolCode,
    isSchoolName,
    isoNow,
    makeExceptionResponses,
    orderQuery,
    paginateQuery,
    sanitize,
    sanitizeFields,
    sanitizeLower,
    sanitizeUpper,
    toBool,
    updateIfChanged,
)

route_school = APIRouter()


## Output Schema
class SchoolSchema(CamelModel):
    id: int
    code: str
    name: str
    address: str
    latitude: float
    longitude: float
    city: str
    state: str
    pincode: str
    phone: Optional[str]
    email: Optional[str]
    principal_name: Optional[str]
    school_type: str
    board_type: Optional[str]
    start_time: str
    end_time: str
    working_days: List[str]
    holidays: Optional[List[str]]
    is_active: bool
    created_at: str
    updated_at: str

    @field_validator("working_days", "holidays", mode="before")
    @classmethod
    def decodeJSON(cls, value):
        if isinstance(value, str):
            return json.loads(value)
        return value


class SchoolResponse(APIResponse):
    data: SchoolSchema


class SchoolListResponse(PaginatedResponse):
    data: List[SchoolSchema]


## Input Forms
class CreateForm(CamelModel):
    name: str
    code: str
    address: str
    latitude: float
    longitude: float
    city: str
    state: str
    pincode: str
    phone: str | None = None
    email: str | None = None
    principal_name: str | None = None
    school_type: str = Field(description=enumStr(SchoolType))
    board_type: str | None = Field(default=None, description=enumStr(BoardType))
    start_time: str = Field(description="24 hour HH:MM")
    end_time: str = Field(description="24 hour HH:MM")
    working_days: List[str] = Field(description=enumStr(Day))
    holidays: List[str] | None = Field(default=None, description="YYYY-MM-DD dates")


class UpdateForm(CamelModel):
    name: str | None = None
    code: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    phone: str | None = None
    email: str | None = None
    principal_name: str | None = None
    school_type: str | None = Field(default=None, description=enumStr(SchoolType))
    board_type: str | None = Field(default=None, description=enumStr(BoardType))
    start_time: str | None = Field(default=None, description="24 hour HH:MM")
    end_time: str | None = Field(default=None, description="24 hour HH:MM")
    working_days: List[str] | None = Field(default=None, description=enumStr(Day))
    holidays: List[str] | None = Field(default=None, description="YYYY-MM-DD dates")
    is_active: bool | None = None


## Query Parameters
class QueryParams(BaseModel):
    # filters
    schoolType: str | None = Field(
        Query(default=None, description=enumStr(SchoolType))
    )
    boardType: str | None = Field(Query(default=None, description=enumStr(BoardType)))
    isActive: str | None = Field(Query(default=None))
    city: str | None = Field(Query(default=None))
    state: str | None = Field(Query(default=None))
    search: str | None = Field(Query(default=None))
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
    sanitizeFields(fParam, sanitizeUpper, [School.code.key])
    sanitizeFields(
        fParam,
        sanitizeLower,
        [School.email.key, School.school_type.key, School.board_type.key],
    )
    sanitizeFields(
        fParam,
        sanitize,
        [
            School.name.key,
            School.address.key,
            School.city.key,
            School.state.key,
            School.pincode.key,
            School.phone.key,
            School.principal_name.key,
            School.start_time.key,
            School.end_time.key,
        ],
    )

    if isinstance(fParam, CreateForm):
        validators.required(fParam.name, "name")
        validators.required(fParam.code, "code")
        validators.required(fParam.address, "address")
        validators.required(fParam.city, "city")
        validators.required(fParam.state, "state")
        validators.required(fParam.pincode, "pincode")
        validators.required(fParam.school_type, "schoolType")
        validators.required(fParam.start_time, "startTime")
        validators.required(fParam.end_time, "endTime")
    else:
        validators.notNull(
            fParam,
            [
                School.name.key,
                School.code.key,
                School.address.key,
                School.latitude.key,
                School.longitude.key,
                School.city.key,
                School.state.key,
                School.pincode.key,
                School.school_type.key,
                School.start_time.key,
                School.end_time.key,
                School.working_days.key,
                School.is_active.key,
            ],
        )

    if fParam.name is not None:
        validators.check(
            isSchoolName(fParam.name),
            "School name must be 2-100 characters and contain only letters, numbers, spaces, and basic punctuation",
        )
    if fParam.code is not None:
        validators.check(
            isSchoolCode(fParam.code),
            "School code must be 3-20 characters and contain only uppercase letters, numbers, hyphens, and underscores",
        )
    if fParam.pincode is not None:
        validators.check(
            isPincode(fParam.pincode), "Please provide a valid 6-digit Indian pincode"
        )
    # Coordinates are checked as a pair by the caller
    validators.time(fParam.start_time, "start")
    validators.time(fParam.end_time, "end")
    if fParam.working_days is not None:
        fParam.working_days = validators.workingDays(fParam.working_days)
    validators.holidays(fParam.holidays)
    validators.email(fParam.email)
    validators.phone(fParam.phone)
    validators.enumMember(fParam.school_type, SchoolType, "school type")
    validators.enumMember(fParam.board_type, BoardType, "board type")


def checkConflicts(session: Session, code: Optional[str], schoolID: Optional[int] = None):
    if code is None:
        return
    query = session.query(School.id).filter(School.code == code)
    if schoolID is not None:
        query = query.filter(School.id != schoolID)
    if query.first() is not None:
        raise exceptions.UniqueViolation("School code already exists")


def getSchool(session: Session, id: str) -> School:
    schoolID = validators.numericID(id, "Valid school ID is required")
    school = session.query(School).filter(School.id == schoolID).first()
    if school is None:
        raise exceptions.UnknownValue("School not found")
    return school


def updateSchool(school: School, fParam: UpdateForm):
    updateIfChanged(
        school,
        fParam,
        [
            School.name.key,
            School.code.key,
            School.address.key,
            School.latitude.key,
            School.longitude.key,
            School.city.key,
            School.state.key,
            School.pincode.key,
            School.phone.key,
            School.email.key,
            School.principal_name.key,
            School.school_type.key,
            School.board_type.key,
            School.start_time.key,
            School.end_time.key,
            School.is_active.key,
        ],
    )
    # JSON encoded columns
    if School.working_days.key in fParam.model_fields_set:
        school.working_days = json.dumps(fParam.working_days)
    if School.holidays.key in fParam.model_fields_set:
        school.holidays = (
            json.dumps(fParam.holidays) if fParam.holidays is not None else None
        )
    school.updated_at = isoNow()


def searchSchool(session: Session, qParam: QueryParams):
    query = session.query(School)

    # Filters
    if qParam.schoolType is not None:
        query = query.filter(School.school_type == qParam.schoolType)
    if qParam.boardType is not None:
        query = query.filter(School.board_type == qParam.boardType)
    if qParam.isActive is not None:
        query = query.filter(School.is_active == toBool(qParam.isActive))
    if qParam.city is not None:
        query = query.filter(School.city.ilike(f"%{qParam.city}%"))
    if qParam.state is not None:
        query = query.filter(School.state.ilike(f"%{qParam.state}%"))
    if qParam.search is not None:
        pattern = f"%{qParam.search}%"
        query = query.filter(
            or_(
                School.name.ilike(pattern),
                School.code.ilike(pattern),
                School.city.ilike(pattern),
                School.principal_name.ilike(pattern),
                School.email.ilike(pattern),
            )
        )
    # created_at based
    if qParam.createdAfter is not None:
        query = query.filter(School.created_at >= qParam.createdAfter)
    if qParam.createdBefore is not None:
        query = query.filter(School.created_at <= qParam.createdBefore)

    # Ordering
    query = orderQuery(
        query,
        qParam.sortBy,
        qParam.sortOrder,
        {
            "createdAt": School.created_at,
            "updatedAt": School.updated_at,
            "name": School.name,
            "code": School.code,
            "city": School.city,
            "state": School.state,
        },
        School.id,
    )

    # Pagination
    return paginateQuery(query, qParam.page, qParam.limit)


## API endpoints
@route_school.post(
    "/create",
    tags=["School"],
    response_model=SchoolResponse,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.MissingField,
            exceptions.InvalidValue,
            exceptions.UniqueViolation,
            exceptions.InternalError,
        ]
    ),
    description="""
    Registers a new school.
    The school code is stored uppercased and must be unique.
    Working days are stored lowercased, at least one is required.
    The location must be a valid WGS84 latitude and longitude.
    Logs the school creation activity with the request metadata.
    """,
)
async def create_school(
    fParam: CreateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validateForm(fParam)
        validators.coordinates(fParam.latitude, fParam.longitude)
        checkConflicts(session, fParam.code)

        timestamp = isoNow()
        school = School(
            code=fParam.code,
            name=fParam.name,
            address=fParam.address,
            latitude=fParam.latitude,
            longitude=fParam.longitude,
            city=fParam.city,
            state=fParam.state,
            pincode=fParam.pincode,
            phone=fParam.phone,
            email=fParam.email,
            principal_name=fParam.principal_name,
            school_type=fParam.school_type,
            board_type=fParam.board_type,
            start_time=fParam.start_time,
            end_time=fParam.end_time,
            working_days=json.dumps(fParam.working_days),
            holidays=(
                json.dumps(fParam.holidays) if fParam.holidays is not None else None
            ),
            is_active=True,
            created_at=timestamp,
            updated_at=timestamp,
        )
        session.add(school)
        session.commit()
        session.refresh(school)

        schoolData = SchoolSchema.model_validate(school)
        logEvent(request_info, jsonable_encoder(schoolData))
        return SchoolResponse(message="School created successfully", data=schoolData)
    except Exception as e:
        exceptions.handle(e, uniqueMessage="School code already exists")
    finally:
        session.close()


@route_school.get(
    "/get-filtered",
    tags=["School"],
    response_model=SchoolListResponse,
    responses=makeExceptionResponses([exceptions.InternalError]),
    description="""
    Fetches a paginated list of schools.
    Supports filtering by school type, board type, activity, city, state and creation date.
    `search` matches name, code, city, principal name and email.
    """,
)
async def fetch_schools(qParam: QueryParams = Depends()):
    session = sessionMaker()
    try:
        schools, pagination = searchSchool(session, qParam)
        return SchoolListResponse(
            message="Schools retrieved successfully",
            data=[SchoolSchema.model_validate(school) for school in schools],
            pagination=pagination,
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_school.get(
    "/get/{identifier}",
    tags=["School"],
    response_model=SchoolResponse,
    responses=makeExceptionResponses([exceptions.UnknownValue]),
    description="""
    Fetches a single school.
    An identifier made of digits only is looked up as the school ID,
    anything else as the school code (case-insensitive).
    """,
)
async def fetch_school(identifier: str):
    session = sessionMaker()
    try:
        if identifier.isdigit() and identifier.isascii():
            query = session.query(School).filter(School.id == int(identifier))
        else:
            query = session.query(School).filter(
                func.upper(School.code) == identifier.strip().upper()
            )
        school = query.first()
        if school is None:
            raise exceptions.UnknownValue("School not found")

        return SchoolResponse(
            message="School retrieved successfully",
            data=SchoolSchema.model_validate(school),
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_school.patch(
    "/update/{id}",
    tags=["School"],
    response_model=SchoolResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidValue,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Partially updates an existing school.
    The school code must stay unique across schools.
    Latitude and longitude are validated together.
    Logs the school updating activity with the request metadata.
    """,
)
async def update_school(
    id: str,
    fParam: UpdateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        school = getSchool(session, id)
        validateForm(fParam)
        if fParam.latitude is not None or fParam.longitude is not None:
            validators.coordinates(
                fParam.latitude if fParam.latitude is not None else school.latitude,
                fParam.longitude if fParam.longitude is not None else school.longitude,
            )
        checkConflicts(session, fParam.code, school.id)

        updateSchool(school, fParam)
        session.commit()
        session.refresh(school)

        schoolData = SchoolSchema.model_validate(school)
        logEvent(request_info, jsonable_encoder(schoolData))
        return SchoolResponse(message="School updated successfully", data=schoolData)
    except Exception as e:
        exceptions.handle(e, uniqueMessage="School code already exists")
    finally:
        session.close()


@route_school.delete(
    "/delete/{id}/{deleteType}",
    tags=["School"],
    response_model=SchoolResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidDeleteType,
            exceptions.UnknownValue,
        ]
    ),
    description="""
    Deletes an existing school.
    `soft` marks the school inactive and can be repeated safely.
    `hard` permanently removes the school.
    Logs the deletion activity with the request metadata.
    """,
)
async def delete_school(
    id: str,
    deleteType: str,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        mode = validators.deleteType(deleteType)
        school = getSchool(session, id)

        if mode == DeleteType.SOFT:
            school.is_active = False
            school.updated_at = isoNow()
            session.commit()
            session.refresh(school)
            schoolData = SchoolSchema.model_validate(school)
        else:
            schoolData = SchoolSchema.model_validate(school)
            session.delete(school)
            session.commit()

        logEvent(request_info, jsonable_encoder(schoolData))
        return SchoolResponse(
            message=f"School {mode.value} deleted successfully", data=schoolData
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
