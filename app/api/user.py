from typing import List, Optional
from uuid import uuid4
from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm.session import Session

from app.src.db import sessionMaker, User
from app.src import exceptions, validators, getters
from app.src.loggers import logEvent
from app.src.enums import GenderType, UserType, DeleteType
from app.src.schemas import APIResponse, CamelModel, PaginatedResponse
from app.src.functions import (
    enumStr,
    isoNow,
    makeExceptionResponses,
    orderQuery,
    paginateQuery,
    sanitize,
    sanitizeFields,
    sanitizeLower,
    toBool,
    updateIfChanged,
)

route_user = APIRouter()


## Output Schema
class UserSchema(CamelModel):
    id: int
    uuid: str
    email: str
    phone_number: str
    first_name: str
    last_name: str
    profile_image: Optional[str]
    date_of_birth: Optional[str]
    gender: Optional[str]
    user_type: str
    is_active: bool
    is_verified: bool
    created_at: str
    updated_at: str


class UserResponse(APIResponse):
    data: UserSchema


class UserListResponse(PaginatedResponse):
    data: List[UserSchema]


## Input Forms
class CreateForm(CamelModel):
    email: str
    phone_number: str
    first_name: str
    last_name: str
    profile_image: str | None = None
    date_of_birth: str | None = None
    gender: str | None = Field(default=None, description=enumStr(GenderType))
    user_type: str | None = Field(default=None, description=enumStr(UserType))


class UpdateForm(CamelModel):
    email: str | None = None
    phone_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image: str | None = None
    date_of_birth: str | None = None
    gender: str | None = Field(default=None, description=enumStr(GenderType))
    user_type: str | None = Field(default=None, description=enumStr(UserType))
    is_active: bool | None = None
    is_verified: bool | None = None


## Query Parameters
class QueryParams(BaseModel):
    # filters
    userType: str | None = Field(Query(default=None, description=enumStr(UserType)))
    gender: str | None = Field(Query(default=None, description=enumStr(GenderType)))
    isActive: str | None = Field(Query(default=None))
    isVerified: str | None = Field(Query(default=None))
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
    sanitizeFields(fParam, sanitizeLower, [User.email.key])
    sanitizeFields(
        fParam,
        sanitize,
        [
            User.phone_number.key,
            User.first_name.key,
            User.last_name.key,
            User.profile_image.key,
            User.date_of_birth.key,
        ],
    )
    sanitizeFields(fParam, sanitizeLower, [User.gender.key, User.user_type.key])

    if isinstance(fParam, CreateForm):
        validators.required(fParam.email, "email")
        validators.required(fParam.phone_number, "phoneNumber")
        validators.required(fParam.first_name, "firstName")
        validators.required(fParam.last_name, "lastName")
    else:
        validators.notNull(
            fParam,
            [
                User.email.key,
                User.phone_number.key,
                User.first_name.key,
                User.last_name.key,
                User.user_type.key,
                User.is_active.key,
                User.is_verified.key,
            ],
        )

    validators.email(fParam.email)
    validators.phone(fParam.phone_number)
    validators.personName(fParam.first_name, "First name")
    validators.personName(fParam.last_name, "Last name")
    validators.dateOfBirth(fParam.date_of_birth)
    validators.imageURL(fParam.profile_image)
    validators.enumMember(fParam.gender, GenderType, "gender")
    validators.enumMember(fParam.user_type, UserType, "user type")


def checkConflicts(
    session: Session,
    email: Optional[str],
    phoneNumber: Optional[str],
    uuid: Optional[str] = None,
):
    if email is not None:
        query = session.query(User.id).filter(User.email == email)
        if uuid is not None:
            query = query.filter(User.uuid != uuid)
        if query.first() is not None:
            raise exceptions.UniqueViolation("Email already exists")
    if phoneNumber is not None:
        query = session.query(User.id).filter(User.phone_number == phoneNumber)
        if uuid is not None:
            query = query.filter(User.uuid != uuid)
        if query.first() is not None:
            raise exceptions.UniqueViolation("Phone number already exists")


def getUser(session: Session, uuid: str) -> User:
    validators.uuidString(uuid, "Invalid user uuid")
    user = session.query(User).filter(User.uuid == uuid).first()
    if user is None:
        raise exceptions.UnknownValue("User not found")
    return user


def searchUser(session: Session, qParam: QueryParams):
    query = session.query(User)

    # Filters
    if qParam.userType is not None:
        query = query.filter(User.user_type == qParam.userType)
    if qParam.gender is not None:
        query = query.filter(User.gender == qParam.gender)
    if qParam.isActive is not None:
        query = query.filter(User.is_active == toBool(qParam.isActive))
    if qParam.isVerified is not None:
        query = query.filter(User.is_verified == toBool(qParam.isVerified))
    if qParam.search is not None:
        pattern = f"%{qParam.search}%"
        query = query.filter(
            or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
                User.phone_number.ilike(pattern),
            )
        )
    # created_at based
    if qParam.createdAfter is not None:
        query = query.filter(User.created_at >= qParam.createdAfter)
    if qParam.createdBefore is not None:
        query = query.filter(User.created_at <= qParam.createdBefore)

    # Ordering
    query = orderQuery(
        query,
        qParam.sortBy,
        qParam.sortOrder,
        {
            "createdAt": User.created_at,
            "updatedAt": User.updated_at,
            "firstName": User.first_name,
            "lastName": User.last_name,
            "email": User.email,
        },
        User.id,
    )

    # Pagination
    return paginateQuery(query, qParam.page, qParam.limit)


## API endpoints
@route_user.post(
    "/create",
    tags=["User"],
    response_model=UserResponse,
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
    Registers a new user.
    Email, phone number, first name and last name are mandatory.
    The email is stored lowercased and must be unique, as must the phone number.
    The user type defaults to `customer`.
    Logs the user creation activity with the request metadata.
    """,
)
async def create_user(
    fParam: CreateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validateForm(fParam)
        checkConflicts(session, fParam.email, fParam.phone_number)

        timestamp = isoNow()
        user = User(
            uuid=str(uuid4()),
            email=fParam.email,
            phone_number=fParam.phone_number,
            first_name=fParam.first_name,
            last_name=fParam.last_name,
            profile_image=fParam.profile_image,
            date_of_birth=fParam.date_of_birth,
            gender=fParam.gender,
            user_type=fParam.user_type or UserType.CUSTOMER.value,
            is_active=True,
            is_verified=False,
            created_at=timestamp,
            updated_at=timestamp,
        )
        session.add(user)
        session.commit()
        session.refresh(user)

        userData = UserSchema.model_validate(user)
        logEvent(request_info, jsonable_encoder(userData))
        return UserResponse(message="User created successfully", data=userData)
    except Exception as e:
        exceptions.handle(e, uniqueMessage="Email or phone number already exists")
    finally:
        session.close()


@route_user.get(
    "/get-all",
    tags=["User"],
    response_model=UserListResponse,
    responses=makeExceptionResponses([exceptions.InternalError]),
    description="""
    Fetches a paginated list of users.
    Supports filtering by user type, gender, activity and verification flags and creation date.
    `search` matches first name, last name, email and phone number case-insensitively.
    Sortable by `createdAt`, `updatedAt`, `firstName`, `lastName` and `email`.
    """,
)
async def fetch_users(qParam: QueryParams = Depends()):
    session = sessionMaker()
    try:
        users, pagination = searchUser(session, qParam)
        return UserListResponse(
            message="Users retrieved successfully",
            data=[UserSchema.model_validate(user) for user in users],
            pagination=pagination,
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_user.get(
    "/get/{uuid}",
    tags=["User"],
    response_model=UserResponse,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.UnknownValue]
    ),
    description="""
    Fetches a single user by UUID.
    """,
)
async def fetch_user(uuid: str):
    session = sessionMaker()
    try:
        user = getUser(session, uuid)
        return UserResponse(
            message="User retrieved successfully",
            data=UserSchema.model_validate(user),
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_user.patch(
    "/update/{uuid}",
    tags=["User"],
    response_model=UserResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidValue,
            exceptions.UnknownValue,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Partially updates an existing user.
    Only the keys present in the body are written, an explicit `null` clears an optional field.
    Email and phone number must stay unique across users.
    Logs the user updating activity with the request metadata.
    """,
)
async def update_user(
    uuid: str,
    fParam: UpdateForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        user = getUser(session, uuid)
        validateForm(fParam)
        checkConflicts(session, fParam.email, fParam.phone_number, uuid)

        updateIfChanged(
            user,
            fParam,
            [
                User.email.key,
                User.phone_number.key,
                User.first_name.key,
                User.last_name.key,
                User.profile_image.key,
                User.date_of_birth.key,
                User.gender.key,
                User.user_type.key,
                User.is_active.key,
                User.is_verified.key,
            ],
        )
        user.updated_at = isoNow()
        session.commit()
        session.refresh(user)

        userData = UserSchema.model_validate(user)
        logEvent(request_info, jsonable_encoder(userData))
        return UserResponse(message="User updated successfully", data=userData)
    except Exception as e:
        exceptions.handle(e, uniqueMessage="Email or phone number already exists")
    finally:
        session.close()


@route_user.delete(
    "/delete/{uuid}/{deleteType}",
    tags=["User"],
    response_model=UserResponse,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidDeleteType,
            exceptions.UnknownValue,
        ]
    ),
    description="""
    Deletes an existing user.
    `soft` marks the user inactive and can be repeated safely.
    `hard` permanently removes the user together with its driver profile and vehicles.
    Logs the deletion activity with the request metadata.
    """,
)
async def delete_user(
    uuid: str,
    deleteType: str,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        mode = validators.deleteType(deleteType)
        user = getUser(session, uuid)

        if mode == DeleteType.SOFT:
            user.is_active = False
            user.updated_at = isoNow()
            session.commit()
            session.refresh(user)
            userData = UserSchema.model_validate(user)
        else:
            userData = UserSchema.model_validate(user)
            session.delete(user)
            session.commit()

        logEvent(request_info, jsonable_encoder(userData))
        return UserResponse(
            message=f"User {mode.value} deleted successfully", data=userData
        )
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
