from sqlalchemy import (
    TEXT,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from app.src.constants import (
    DATABASE_URL,
    PSQL_DB_DRIVER,
    PSQL_DB_HOST,
    PSQL_DB_PASSWORD,
    PSQL_DB_NAME,
    PSQL_DB_PORT,
    PSQL_DB_USERNAME,
)
from app.src.enums import (
    BackgroundCheckStatus,
    DriverStatus,
    UserType,
    VerificationStatus,
)


# Global DBMS variables
dbURL = (
    DATABASE_URL
    or f"{PSQL_DB_DRIVER}://{PSQL_DB_USERNAME}:{PSQL_DB_PASSWORD}@{PSQL_DB_HOST}:{PSQL_DB_PORT}/{PSQL_DB_NAME}"
)
engine = create_engine(url=dbURL, echo=False)
sessionMaker = sessionmaker(bind=engine, expire_on_commit=False)
ORMbase = declarative_base()


if engine.dialect.name == "sqlite":
    # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled per connection
    @event.listens_for(engine, "connect")
    def enableForeignKeys(dbapiConnection, connectionRecord):
        cursor = dbapiConnection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ----------------------------------- General DB Models ---------------------------------------#
class User(ORMbase):
    """
    Represents a person registered on the platform. Every driver, parent,
    student, guardian and plain customer starts as a user record.

    Columns:
        id (Integer):
            Primary key. Internal numeric identifier.

        uuid (TEXT):
            Externally visible identifier (UUID4), generated on signup.
            Used in every user facing URL. Must be unique and not null.

        email (TEXT):
            Email address, stored lowercased.
            Must be unique and not null.

        phone_number (TEXT):
            Indian mobile number, 10 digits starting with 6-9.
            Must be unique and not null.

        first_name (TEXT):
            Given name, 2-50 letters and spaces.

        last_name (TEXT):
            Family name, 2-50 letters and spaces.

        profile_image (TEXT):
            Optional http(s) URL of the profile picture.

        date_of_birth (TEXT):
            Optional birth date in YYYY-MM-DD format.
            The user must be between 13 and 120 years old.

        gender (String):
            Optional. Mapped from the `GenderType` enum.

        user_type (String):
            Role of the user on the platform. Mapped from the `UserType` enum.
            Defaults to `UserType.CUSTOMER`.

        is_active (Boolean):
            False once the user is soft deleted. Defaults to True.

        is_verified (Boolean):
            Whether the user identity has been verified. Defaults to False.

        updated_at (TEXT):
            ISO-8601 timestamp of the last modification.

        created_at (TEXT):
            ISO-8601 timestamp of the creation.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), nullable=False, unique=True)
    email = Column(TEXT, nullable=False, unique=True, index=True)
    phone_number = Column(String(10), nullable=False, unique=True, index=True)
    first_name = Column(TEXT, nullable=False)
    last_name = Column(TEXT, nullable=False)
    profile_image = Column(TEXT)
    date_of_birth = Column(String(10))
    gender = Column(String(16))
    user_type = Column(
        String(16), nullable=False, default=UserType.CUSTOMER.value, index=True
    )
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    # Metadata
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)


class Driver(ORMbase):
    """
    Represents the driver profile of a user, holding identity documents,
    payout details and operational counters.

    A user can have at most one driver profile. Removing the user removes
    the profile, and removing the profile removes its vehicles.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the driver.

        user_uuid (TEXT):
            Foreign key referencing `users.uuid`.
            Cascades on delete. Unique, one profile per user.

        license_number (TEXT):
            Driving license number, 10-20 characters, stored uppercased.
            Must be unique and not null.

        license_expiry_date (TEXT):
            License expiry date in YYYY-MM-DD format.
            Must be in the future when provided.

        license_image_url (TEXT):
            http(s) URL of the scanned license.

        aadhar_number (TEXT):
            12 digit Aadhar number. Must be unique and not null.

        aadhar_image_url (TEXT):
            http(s) URL of the scanned Aadhar card.

        pan_number (TEXT):
            Optional PAN (5 letters, 4 digits, 1 letter). Unique when present.

        pan_image_url (TEXT):
            Optional http(s) URL of the scanned PAN card.

        police_verification_cert_url (TEXT):
            Optional http(s) URL of the police verification certificate.

        background_check_status (String):
            Mapped from the `BackgroundCheckStatus` enum.
            Defaults to `BackgroundCheckStatus.PENDING`.

        emergency_contact_name (TEXT):
            Name of the emergency contact person.

        emergency_contact_phone (TEXT):
            Indian mobile number of the emergency contact person.

        bank_account_number, bank_ifsc_code, bank_account_holder_name, upi_id (TEXT):
            Optional payout details. Each can be cleared with an explicit null.

        status (String):
            Lifecycle status, mapped from the `DriverStatus` enum.
            Defaults to `DriverStatus.PENDING`.

        approved_at, rejected_at (TEXT):
            Stamped when the status moves into approved or rejected.

        rejection_reason (TEXT):
            Optional free text explaining a rejection.

        rating (Float):
            Average rating between 0 and 5. Defaults to 0.

        total_rides (Integer):
            Cumulative number of completed rides. Defaults to 0.

        total_earnings (Float):
            Cumulative earnings. Defaults to 0.

        is_online (Boolean):
            Whether the driver is currently accepting rides.

        last_online_at (TEXT):
            Stamped whenever `is_online` changes.

        is_active (Boolean):
            False once the driver is soft deleted. Defaults to True.

        updated_at, created_at (TEXT):
            ISO-8601 modification and creation timestamps.
    """

    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True)
    user_uuid = Column(
        String(36),
        ForeignKey("users.uuid", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    # Identity documents
    license_number = Column(String(20), nullable=False, unique=True, index=True)
    license_expiry_date = Column(String(10), nullable=False)
    license_image_url = Column(TEXT, nullable=False)
    aadhar_number = Column(String(12), nullable=False, unique=True, index=True)
    aadhar_image_url = Column(TEXT, nullable=False)
    pan_number = Column(String(10), unique=True)
    pan_image_url = Column(TEXT)
    police_verification_cert_url = Column(TEXT)
    background_check_status = Column(
        String(16), nullable=False, default=BackgroundCheckStatus.PENDING.value
    )
    # Emergency contact
    emergency_contact_name = Column(TEXT, nullable=False)
    emergency_contact_phone = Column(String(10), nullable=False)
    # Payout details
    bank_account_number = Column(TEXT)
    bank_ifsc_code = Column(String(11))
    bank_account_holder_name = Column(TEXT)
    upi_id = Column(TEXT)
    # Lifecycle
    status = Column(
        String(16), nullable=False, default=DriverStatus.PENDING.value, index=True
    )
    approved_at = Column(String(32))
    rejected_at = Column(String(32))
    rejection_reason = Column(TEXT)
    # Counters
    rating = Column(Float, default=0)
    total_rides = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Float, nullable=False, default=0)
    is_online = Column(Boolean, nullable=False, default=False)
    last_online_at = Column(String(32))
    is_active = Column(Boolean, nullable=False, default=True)
    # Metadata
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)


class Vehicle(ORMbase):
    """
    Represents a vehicle operated by a driver.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the vehicle.

        driver_id (Integer):
            Foreign key referencing `drivers.id`. Cascades on delete.

        vehicle_type (String):
            Mapped from the `VehicleType` enum.

        registration_number (String(16)):
            Indian registration number without spaces, e.g. `MH12AB1234`.
            Must be unique and not null.

        make, model, color (TEXT):
            Descriptive attributes of the vehicle.

        year (Integer):
            Manufacturing year, between 1990 and the current year.

        capacity (Integer):
            Seating capacity, bounded by the vehicle type
            (bike 1-2, auto 2-6, car 4-8, van 6-15, bus 10-60).

        rc_image_url, insurance_cert_url (TEXT):
            http(s) URLs of the registration and insurance certificates.

        insurance_expiry_date (TEXT):
            Insurance expiry date in YYYY-MM-DD format.

        puc_cert_url, puc_expiry_date (TEXT):
            Optional pollution under control certificate and its expiry.

        permit_image_url, permit_expiry_date (TEXT):
            Optional permit and its expiry.

        vehicle_image_urls (TEXT):
            Optional JSON encoded array of http(s) image URLs.

        is_active (Boolean):
            False once the vehicle is soft deleted. Defaults to True.

        verification_status (String):
            Mapped from the `VerificationStatus` enum.
            Defaults to `VerificationStatus.PENDING`.

        updated_at, created_at (TEXT):
            ISO-8601 modification and creation timestamps.
    """

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    driver_id = Column(
        Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_type = Column(String(8), nullable=False)
    registration_number = Column(String(16), nullable=False, unique=True, index=True)
    make = Column(TEXT, nullable=False)
    model = Column(TEXT, nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(TEXT, nullable=False)
    capacity = Column(Integer, nullable=False)
    # Documents
    rc_image_url = Column(TEXT, nullable=False)
    insurance_cert_url = Column(TEXT, nullable=False)
    insurance_expiry_date = Column(String(10), nullable=False)
    puc_cert_url = Column(TEXT)
    puc_expiry_date = Column(String(10))
    permit_image_url = Column(TEXT)
    permit_expiry_date = Column(String(10))
    vehicle_image_urls = Column(TEXT)
    is_active = Column(Boolean, nullable=False, default=True)
    verification_status = Column(
        String(16), nullable=False, default=VerificationStatus.PENDING.value
    )
    # Metadata
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)


class School(ORMbase):
    """
    Represents a school served by the school transport product.

    Columns:
        id (Integer):
            Primary key. Unique identifier for the school.

        code (String(20)):
            Board issued school code, 3-20 characters of uppercase letters,
            digits, hyphens and underscores. Must be unique and not null.

        name (TEXT):
            Display name of the school.

        address, city, state (TEXT):
            Postal address of the school.

        pincode (String(6)):
            6 digit Indian pincode, not starting with 0.

        latitude, longitude (Float):
            Location of the school in SRID 4326 (WGS84).

        phone, email, principal_name (TEXT):
            Optional contact details.

        school_type (String):
            Mapped from the `SchoolType` enum.

        board_type (String):
            Optional. Mapped from the `BoardType` enum.

        start_time, end_time (String(5)):
            Operating hours in 24 hour HH:MM format.

        working_days (TEXT):
            JSON encoded, non-empty array of lowercase weekday names.

        holidays (TEXT):
            Optional JSON encoded array of YYYY-MM-DD dates.

        is_active (Boolean):
            False once the school is soft deleted. Defaults to True.

        updated_at, created_at (TEXT):
            ISO-8601 modification and creation timestamps.
    """

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(TEXT, nullable=False)
    address = Column(TEXT, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    city = Column(TEXT, nullable=False, index=True)
    state = Column(TEXT, nullable=False)
    pincode = Column(String(6), nullable=False)
    # Contact details
    phone = Column(String(10))
    email = Column(TEXT)
    principal_name = Column(TEXT)
    school_type = Column(String(16), nullable=False, index=True)
    board_type = Column(String(8))
    # Operating schedule
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    working_days = Column(TEXT, nullable=False)
    holidays = Column(TEXT)
    is_active = Column(Boolean, nullable=False, default=True)
    # Metadata
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)
