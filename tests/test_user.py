import uuid
import pytest

from conftest import userPayload


@pytest.mark.asyncio
async def test_create_user_defaults(client):
    response = await client.post(
        "/users/create",
        json=userPayload(email="  Asha.Menon@Example.COM ", firstName="Asha   Rani"),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User created successfully"

    user = body["data"]
    assert uuid.UUID(user["uuid"])
    assert user["email"] == "asha.menon@example.com"
    assert user["firstName"] == "Asha Rani"
    assert user["userType"] == "customer"
    assert user["isActive"] is True
    assert user["isVerified"] is False
    assert user["createdAt"].endswith("Z")
    assert user["createdAt"] == user["updatedAt"]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["email", "phoneNumber", "firstName", "lastName"])
async def test_create_user_missing_field(client, field):
    payload = userPayload()
    del payload[field]
    response = await client.post("/users/create", json=payload)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": f"{field} is required"}

    response = await client.get("/users/get-all")
    assert response.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_create_user_blank_field(client):
    response = await client.post("/users/create", json=userPayload(lastName="   "))
    assert response.status_code == 400
    assert response.json()["message"] == "lastName is required"


@pytest.mark.asyncio
async def test_missing_field_reported_before_invalid_type(client):
    payload = userPayload(firstName=12)
    del payload["email"]
    response = await client.post("/users/create", json=payload)
    assert response.status_code == 400
    assert response.json()["message"] == "email is required"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"email": "asha@example"}, "Please provide a valid email address"),
        (
            {"phoneNumber": "5876543210"},
            "Please provide a valid Indian mobile number (10 digits starting with 6-9)",
        ),
        (
            {"firstName": "A1"},
            "First name must be 2-50 characters and contain only letters and spaces",
        ),
        ({"dateOfBirth": "14-05-1990"}, "Date of birth must be in YYYY-MM-DD format"),
        ({"dateOfBirth": "2023-02-30"}, "Date of birth must be in YYYY-MM-DD format"),
        ({"dateOfBirth": "2020-01-01"}, "Age must be between 13 and 120 years"),
        ({"profileImage": "ftp://cdn.example.com/a.jpg"}, "Please provide a valid image URL"),
        ({"gender": "unknown"}, "Invalid gender. Must be one of: male, female, other"),
        (
            {"userType": "admin"},
            "Invalid user type. Must be one of: customer, driver, parent, student, guardian",
        ),
    ],
)
async def test_create_user_invalid_field(client, overrides, message):
    response = await client.post("/users/create", json=userPayload(**overrides))
    assert response.status_code == 400
    assert response.json()["message"] == message


@pytest.mark.asyncio
async def test_create_user_conflicts(client, createUser):
    await createUser(0)

    response = await client.post(
        "/users/create", json=userPayload(1, email="USER0@example.com")
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Email already exists"

    response = await client.post(
        "/users/create", json=userPayload(1, phoneNumber="9876500000")
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Phone number already exists"


@pytest.mark.asyncio
async def test_get_user(client, createUser):
    user = await createUser()

    response = await client.get(f"/users/get/{user['uuid']}")
    assert response.status_code == 200
    assert response.json()["data"] == user

    response = await client.get(f"/users/get/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"

    response = await client.get("/users/get/not-a-uuid")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_user(client, createUser):
    user = await createUser(profileImage="https://cdn.example.com/asha.jpg")

    response = await client.patch(
        f"/users/update/{user['uuid']}",
        json={"lastName": "Nair", "profileImage": None, "isVerified": True},
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["lastName"] == "Nair"
    assert updated["profileImage"] is None
    assert updated["isVerified"] is True
    assert updated["firstName"] == user["firstName"]
    assert updated["updatedAt"] >= user["updatedAt"]


@pytest.mark.asyncio
async def test_update_user_rejects_null_required_field(client, createUser):
    user = await createUser()
    response = await client.patch(
        f"/users/update/{user['uuid']}", json={"firstName": None}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_user_conflict_excludes_self(client, createUser):
    user = await createUser(0)
    await createUser(1)

    response = await client.patch(
        f"/users/update/{user['uuid']}", json={"email": "user0@example.com"}
    )
    assert response.status_code == 200

    response = await client.patch(
        f"/users/update/{user['uuid']}", json={"email": "user1@example.com"}
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Email already exists"


@pytest.mark.asyncio
async def test_soft_delete_user_is_idempotent(client, createUser):
    user = await createUser()

    for _ in range(2):
        response = await client.delete(f"/users/delete/{user['uuid']}/soft")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User soft deleted successfully"
        assert body["data"]["isActive"] is False

    response = await client.get(f"/users/get/{user['uuid']}")
    assert response.json()["data"]["isActive"] is False


@pytest.mark.asyncio
async def test_hard_delete_user_cascades(client, createDriver, createVehicle):
    driver = await createDriver()
    vehicle = await createVehicle(driver["id"])

    response = await client.delete(f"/users/delete/{driver['user_uuid']}/hard")
    assert response.status_code == 200
    assert response.json()["message"] == "User hard deleted successfully"

    response = await client.get(f"/users/get/{driver['user_uuid']}")
    assert response.status_code == 404
    response = await client.get(f"/driver/get/{driver['user_uuid']}")
    assert response.status_code == 404
    response = await client.get(f"/vehicle/get/{vehicle['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_user_invalid_type(client, createUser):
    user = await createUser()
    response = await client.delete(f"/users/delete/{user['uuid']}/bogus")
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": 'Invalid delete type. It must be either "soft" or "hard"',
    }


@pytest.mark.asyncio
async def test_list_users_pagination(client, createUser):
    for index in range(25):
        await createUser(index)

    response = await client.get("/users/get-all", params={"limit": 10, "page": 3})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Users retrieved successfully"
    assert len(body["data"]) == 5
    assert body["pagination"] == {
        "page": 3,
        "limit": 10,
        "total": 25,
        "totalPages": 3,
        "hasNext": False,
        "hasPrev": True,
    }


@pytest.mark.asyncio
async def test_list_users_pagination_fallbacks(client, createUser):
    await createUser()

    response = await client.get("/users/get-all", params={"limit": 500, "page": "x"})
    pagination = response.json()["pagination"]
    assert pagination["limit"] == 100
    assert pagination["page"] == 1

    response = await client.get("/users/get-all", params={"limit": "abc"})
    assert response.json()["pagination"]["limit"] == 10


@pytest.mark.asyncio
async def test_list_users_page_far_past_the_end(client, createUser):
    await createUser()

    response = await client.get("/users/get-all", params={"page": "1e300"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == []
    assert body["pagination"]["total"] == 1
    assert body["pagination"]["hasNext"] is False


@pytest.mark.asyncio
async def test_list_users_filters_and_search(client, createUser):
    await createUser(0, firstName="Ravi", userType="driver")
    await createUser(1, firstName="Sneha", userType="parent")
    await createUser(2, firstName="Ravindra", userType="parent")

    response = await client.get("/users/get-all", params={"search": "RAVI"})
    names = {user["firstName"] for user in response.json()["data"]}
    assert names == {"Ravi", "Ravindra"}

    response = await client.get(
        "/users/get-all", params={"userType": "parent", "search": "ravi"}
    )
    assert [user["firstName"] for user in response.json()["data"]] == ["Ravindra"]

    response = await client.get(
        "/users/get-all", params={"sortBy": "firstName", "sortOrder": "asc"}
    )
    names = [user["firstName"] for user in response.json()["data"]]
    assert names == ["Ravi", "Ravindra", "Sneha"]


@pytest.mark.asyncio
async def test_list_users_boolean_filter(client, createUser):
    user = await createUser(0)
    await createUser(1)
    await client.delete(f"/users/delete/{user['uuid']}/soft")

    response = await client.get("/users/get-all", params={"isActive": "true"})
    assert response.json()["pagination"]["total"] == 1

    response = await client.get("/users/get-all", params={"isActive": "no"})
    data = response.json()["data"]
    assert [row["uuid"] for row in data] == [user["uuid"]]


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "OK", "version": "1.0.0"}
