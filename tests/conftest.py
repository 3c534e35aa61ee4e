import os
import tempfile
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Configuration is read at import time, so the environment is prepared first
TEST_DATABASE_DIR = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(TEST_DATABASE_DIR, 'test.db')}"
os.environ["OPENOBSERVE_ENABLED"] = "false"

from app.main import app  # noqa: E402
from app.src.db import ORMbase, engine  # noqa: E402


def userPayload(index: int = 0, **overrides) -> dict:
    data = {
        "email": f"user{index}@example.com",
        "phoneNumber": f"98765{index:05d}",
        "firstName": "Asha",
        "lastName": "Menon",
    }
    data.update(overrides)
    return data


def driverPayload(userUUID: str, index: int = 0, **overrides) -> dict:
    data = {
        "user_uuid": userUUID,
        "licenseNumber": f"KL012020{index:07d}",
        "licenseExpiryDate": "2035-12-31",
        "licenseImageUrl": "https://cdn.example.com/license.jpg",
        "aadharNumber": f"{123456780000 + index}",
        "aadharImageUrl": "https://cdn.example.com/aadhar.jpg",
        "emergencyContactName": "Meera Menon",
        "emergencyContactPhone": "9123456780",
    }
    data.update(overrides)
    return data


def vehiclePayload(driverID: int, index: int = 0, **overrides) -> dict:
    data = {
        "driverId": driverID,
        "vehicleType": "car",
        "registrationNumber": f"KL01AB{index:04d}",
        "make": "Maruti",
        "model": "Dzire",
        "year": 2021,
        "color": "White",
        "capacity": 4,
        "rcImageUrl": "https://cdn.example.com/rc.jpg",
        "insuranceCertUrl": "https://cdn.example.com/insurance.pdf",
        "insuranceExpiryDate": "2027-03-31",
    }
    data.update(overrides)
    return data


def schoolPayload(index: int = 0, **overrides) -> dict:
    data = {
        "name": "Greenfield Public School",
        "code": f"SCH-{index:03d}",
        "address": "MG Road",
        "latitude": 12.9716,
        "longitude": 77.5946,
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "schoolType": "private",
        "startTime": "08:30",
        "endTime": "15:30",
        "workingDays": ["monday", "tuesday", "wednesday", "thursday", "friday"],
    }
    data.update(overrides)
    return data


@pytest_asyncio.fixture(scope="function")
async def client():
    ORMbase.metadata.create_all(engine)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    ORMbase.metadata.drop_all(engine)


@pytest.fixture
def createUser(client):
    async def create(index: int = 0, **overrides) -> dict:
        response = await client.post(
            "/users/create", json=userPayload(index, **overrides)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return create


@pytest.fixture
def createDriver(client, createUser):
    async def create(index: int = 0, **overrides) -> dict:
        user = await createUser(index)
        response = await client.post(
            "/driver/create", json=driverPayload(user["uuid"], index, **overrides)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return create


@pytest.fixture
def createVehicle(client):
    async def create(driverID: int, index: int = 0, **overrides) -> dict:
        response = await client.post(
            "/vehicle/create", json=vehiclePayload(driverID, index, **overrides)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return create


@pytest.fixture
def createSchool(client):
    async def create(index: int = 0, **overrides) -> dict:
        response = await client.post(
            "/school/create", json=schoolPayload(index, **overrides)
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return create
