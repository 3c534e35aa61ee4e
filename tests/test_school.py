import pytest

from conftest import schoolPayload


@pytest.mark.asyncio
async def test_create_school(client):
    response = await client.post(
        "/school/create",
        json=schoolPayload(
            code="blr-gps_01",
            workingDays=["Monday", "FRIDAY"],
            holidays=["2026-12-25"],
            email="Office@Greenfield.example.com",
        ),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "School created successfully"

    school = body["data"]
    assert school["code"] == "BLR-GPS_01"
    assert school["workingDays"] == ["monday", "friday"]
    assert school["holidays"] == ["2026-12-25"]
    assert school["email"] == "office@greenfield.example.com"
    assert school["isActive"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field",
    [
        "name",
        "code",
        "address",
        "latitude",
        "longitude",
        "city",
        "state",
        "pincode",
        "schoolType",
        "startTime",
        "endTime",
        "workingDays",
    ],
)
async def test_create_school_missing_field(client, field):
    payload = schoolPayload()
    del payload[field]
    response = await client.post("/school/create", json=payload)
    assert response.status_code == 400
    assert response.json()["message"] == f"{field} is required"

    response = await client.get("/school/get-filtered")
    assert response.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        (
            {"name": "X"},
            "School name must be 2-100 characters and contain only letters, numbers, spaces, and basic punctuation",
        ),
        (
            {"code": "AB"},
            "School code must be 3-20 characters and contain only uppercase letters, numbers, hyphens, and underscores",
        ),
        ({"pincode": "056001"}, "Please provide a valid 6-digit Indian pincode"),
        (
            {"latitude": 91},
            "Please provide valid latitude (-90 to 90) and longitude (-180 to 180) coordinates",
        ),
        (
            {"longitude": -180.5},
            "Please provide valid latitude (-90 to 90) and longitude (-180 to 180) coordinates",
        ),
        ({"startTime": "8:30"}, "Please provide valid start time in HH:MM format"),
        ({"endTime": "24:00"}, "Please provide valid end time in HH:MM format"),
        (
            {"workingDays": ["monday", "funday"]},
            "Please provide valid working days (monday, tuesday, wednesday, thursday, friday, saturday, sunday)",
        ),
        (
            {"workingDays": []},
            "Please provide valid working days (monday, tuesday, wednesday, thursday, friday, saturday, sunday)",
        ),
        ({"email": "office"}, "Please provide a valid email address"),
        (
            {"schoolType": "charter"},
            "Invalid school type. Must be one of: government, private, aided, international, boarding",
        ),
        (
            {"boardType": "gcse"},
            "Invalid board type. Must be one of: cbse, icse, state, igcse, ib, other",
        ),
    ],
)
async def test_create_school_invalid_field(client, overrides, message):
    response = await client.post("/school/create", json=schoolPayload(**overrides))
    assert response.status_code == 400
    assert response.json()["message"] == message


@pytest.mark.asyncio
async def test_create_school_duplicate_code(client, createSchool):
    await createSchool(code="SCH-001")
    response = await client.post("/school/create", json=schoolPayload(code="sch-001"))
    assert response.status_code == 409
    assert response.json()["message"] == "School code already exists"


@pytest.mark.asyncio
async def test_get_school_by_id_or_code(client, createSchool):
    school = await createSchool(code="SCH-042")

    response = await client.get(f"/school/get/{school['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == school

    response = await client.get("/school/get/sch-042")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == school["id"]

    response = await client.get("/school/get/UNKNOWN")
    assert response.status_code == 404
    assert response.json()["message"] == "School not found"


@pytest.mark.asyncio
async def test_update_school(client, createSchool):
    school = await createSchool(holidays=["2026-12-25"], principalName="Anna Thomas")
    url = f"/school/update/{school['id']}"

    response = await client.patch(
        url,
        json={"workingDays": ["saturday"], "holidays": None, "principalName": None},
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["workingDays"] == ["saturday"]
    assert updated["holidays"] is None
    assert updated["principalName"] is None
    assert updated["name"] == school["name"]

    response = await client.patch(url, json={"latitude": -95})
    assert response.status_code == 400

    response = await client.patch(url, json={"workingDays": None})
    assert response.status_code == 400

    response = await client.patch("/school/update/abc", json={"city": "Mysuru"})
    assert response.status_code == 400
    assert response.json()["message"] == "Valid school ID is required"


@pytest.mark.asyncio
async def test_update_school_code_conflict(client, createSchool):
    first = await createSchool(0)
    second = await createSchool(1)

    response = await client.patch(
        f"/school/update/{second['id']}", json={"code": first["code"].lower()}
    )
    assert response.status_code == 409

    response = await client.patch(
        f"/school/update/{second['id']}", json={"code": second["code"]}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_delete_school(client, createSchool):
    school = await createSchool()

    response = await client.delete(f"/school/delete/{school['id']}/soft")
    assert response.status_code == 200
    assert response.json()["message"] == "School soft deleted successfully"
    assert response.json()["data"]["isActive"] is False

    response = await client.delete(f"/school/delete/{school['id']}/purge")
    assert response.status_code == 400

    response = await client.delete(f"/school/delete/{school['id']}/hard")
    assert response.status_code == 200
    response = await client.get(f"/school/get/{school['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_schools(client, createSchool):
    await createSchool(0, city="Bengaluru", name="Greenfield Public School")
    await createSchool(1, city="Mysuru", name="Cauvery Vidya Mandir", schoolType="government")
    await createSchool(2, city="Bengaluru", name="Lakeside Academy", boardType="icse")

    response = await client.get("/school/get-filtered", params={"city": "bengal"})
    assert response.json()["pagination"]["total"] == 2

    response = await client.get("/school/get-filtered", params={"schoolType": "government"})
    assert [row["name"] for row in response.json()["data"]] == ["Cauvery Vidya Mandir"]

    response = await client.get(
        "/school/get-filtered", params={"sortBy": "name", "sortOrder": "asc"}
    )
    names = [row["name"] for row in response.json()["data"]]
    assert names == ["Cauvery Vidya Mandir", "Greenfield Public School", "Lakeside Academy"]

    response = await client.get("/school/get-filtered", params={"search": "sch-002"})
    assert [row["name"] for row in response.json()["data"]] == ["Lakeside Academy"]
