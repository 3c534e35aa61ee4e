from enum import Enum


class DeleteType(str, Enum):
    SOFT = "soft"
    HARD = "hard"


class OrderIn(str, Enum):
    ASC = "asc"
    DESC = "desc"


class GenderType(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class UserType(str, Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    PARENT = "parent"
    STUDENT = "student"
    GUARDIAN = "guardian"


class BackgroundCheckStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


class DriverStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class VehicleType(str, Enum):
    AUTO = "auto"
    CAR = "car"
    BIKE = "bike"
    BUS = "bus"
    VAN = "van"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SchoolType(str, Enum):
    GOVERNMENT = "government"
    PRIVATE = "private"
    AIDED = "aided"
    INTERNATIONAL = "international"
    BOARDING = "boarding"


class BoardType(str, Enum):
    CBSE = "cbse"
    ICSE = "icse"
    STATE = "state"
    IGCSE = "igcse"
    IB = "ib"
    OTHER = "other"


class Day(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
