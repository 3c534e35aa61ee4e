import pytest

from conftest import vehiclePayload


@pytest.mark.asyncio
async def test_create_vehicle(client, createDriver):
    driver = await createDriver()
    response = await client.post(
        "/vehicle/create",
        json=vehiclePayload(
            driver["id"],
            registrationNumber="mh 12 ab 1234",
            vehicleImageUrls='["https://cdn.example.com/front.jpg"]',
        ),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Vehicle created successfully"

    vehicle = body["data"]
    assert vehicle["registrationNumber"] == "MH12AB1234"
    assert vehicle["driverId"] == driver["id"]
    assert vehicle["isActive"] is True
    assert vehicle["verificationStatus"] == "pending"
    assert vehicle["vehicleImageUrls"] == '["https://cdn.example.com/front.jpg"]'


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "capacity, status_code", [(3, 400), (4, 201), (8, 201), (9, 400)]
)
async def test_car_capacity_limits(client, createDriver, capacity, status_code):
    driver = await createDriver()
    response = await client.post(
        "/vehicle/create", json=vehiclePayload(driver["id"], capacity=capacity)
    )
    assert response.status_code == status_code
    if status_code == 400:
        assert response.json()["message"] == "Invalid capacity for vehicle type car"


@pytest.mark.asyncio
async def test_create_vehicle_unknown_driver(client):
    response = await client.post("/vehicle/create", json=vehiclePayload(999))
    assert response.status_code == 404
    assert response.json()["message"] == "Driver not found"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field",
    [
        "driverId",
        "vehicleType",
        "registrationNumber",
        "make",
        "model",
        "year",
        "color",
        "capacity",
        "rcImageUrl",
        "insuranceCertUrl",
        "insuranceExpiryDate",
    ],
)
async def test_create_vehicle_missing_field(client, createDriver, field):
    driver = await createDriver()
    payload = vehiclePayload(driver["id"])
    del payload[field]
    response = await client.post("/vehicle/create", json=payload)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": f"{field} is required"}

    response = await client.get("/vehicle/get-all")
    assert response.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        (
            {"vehicleType": "truck"},
            "Invalid vehicle type. Must be one of: auto, car, bike, bus, van",
        ),
        (
            {"registrationNumber": "12AB34"},
            "Invalid registration number format. Expected format: XX00XX0000",
        ),
        ({"rcImageUrl": "not a url"}, "Invalid RC image URL"),
        (
            {"pucExpiryDate": "2027/01/01"},
            "PUC expiry date must be in YYYY-MM-DD format",
        ),
        (
            {"vehicleImageUrls": '{"front": "https://cdn.example.com/a.jpg"}'},
            "Invalid vehicle image URLs. Must be a valid JSON array of image URLs",
        ),
        (
            {"vehicleImageUrls": "not json"},
            "Invalid vehicle image URLs. Must be a valid JSON array of image URLs",
        ),
    ],
)
async def test_create_vehicle_invalid_field(client, createDriver, overrides, message):
    driver = await createDriver()
    response = await client.post(
        "/vehicle/create", json=vehiclePayload(driver["id"], **overrides)
    )
    assert response.status_code == 400
    assert response.json()["message"] == message


@pytest.mark.asyncio
async def test_create_vehicle_invalid_year(client, createDriver):
    driver = await createDriver()
    response = await client.post(
        "/vehicle/create", json=vehiclePayload(driver["id"], year=1985)
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid year. Must be between 1990 and")


@pytest.mark.asyncio
async def test_create_vehicle_duplicate_registration(client, createDriver, createVehicle):
    driver = await createDriver()
    await createVehicle(driver["id"], registrationNumber="KL01AB1234")

    response = await client.post(
        "/vehicle/create",
        json=vehiclePayload(driver["id"], registrationNumber="kl 01 ab 1234"),
    )
    assert response.status_code == 409
    assert (
        response.json()["message"]
        == "Vehicle with this registration number already exists"
    )


@pytest.mark.asyncio
async def test_get_vehicle(client, createDriver, createVehicle):
    driver = await createDriver()
    vehicle = await createVehicle(driver["id"])

    response = await client.get(f"/vehicle/get/{vehicle['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == vehicle

    response = await client.get("/vehicle/get/abc")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid vehicle ID"

    response = await client.get("/vehicle/get/999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_vehicle_rechecks_capacity(client, createDriver, createVehicle):
    driver = await createDriver()
    vehicle = await createVehicle(driver["id"], capacity=6)
    url = f"/vehicle/update/{vehicle['id']}"

    response = await client.patch(url, json={"vehicleType": "bike"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid capacity for vehicle type bike"

    response = await client.patch(url, json={"vehicleType": "van"})
    assert response.status_code == 200

    response = await client.patch(url, json={"capacity": 15})
    assert response.status_code == 200
    assert response.json()["data"]["capacity"] == 15


@pytest.mark.asyncio
async def test_update_vehicle_driver_and_status(client, createDriver, createVehicle):
    first = await createDriver(0)
    second = await createDriver(1)
    vehicle = await createVehicle(first["id"])
    url = f"/vehicle/update/{vehicle['id']}"

    response = await client.patch(url, json={"driverId": 999})
    assert response.status_code == 404

    response = await client.patch(
        url, json={"driverId": second["id"], "verificationStatus": "approved"}
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["driverId"] == second["id"]
    assert updated["verificationStatus"] == "approved"

    response = await client.patch(url, json={"verificationStatus": "done"})
    assert response.status_code == 400
    assert (
        response.json()["message"]
        == "Invalid verification status. Must be one of: pending, approved, rejected"
    )


@pytest.mark.asyncio
async def test_delete_vehicle(client, createDriver, createVehicle):
    driver = await createDriver()
    vehicle = await createVehicle(driver["id"])

    response = await client.delete(f"/vehicle/delete/{vehicle['id']}/soft")
    assert response.status_code == 200
    assert response.json()["data"]["isActive"] is False

    response = await client.delete(f"/vehicle/delete/{vehicle['id']}/hard")
    assert response.status_code == 200
    assert response.json()["message"] == "Vehicle hard deleted successfully"

    response = await client.get(f"/vehicle/get/{vehicle['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_vehicles_filters(client, createDriver, createVehicle):
    first = await createDriver(0)
    second = await createDriver(1)
    await createVehicle(first["id"], 0, make="Maruti", year=2015)
    await createVehicle(
        first["id"], 1, vehicleType="bus", capacity=40, make="Tata", year=2020
    )
    await createVehicle(second["id"], 2, make="Mahindra", year=2022)

    response = await client.get("/vehicle/get-all", params={"driverId": first["id"]})
    assert response.json()["pagination"]["total"] == 2

    response = await client.get("/vehicle/get-all", params={"vehicleType": "bus"})
    assert [row["make"] for row in response.json()["data"]] == ["Tata"]

    response = await client.get(
        "/vehicle/get-all",
        params={"yearFrom": 2016, "sortBy": "year", "sortOrder": "asc"},
    )
    assert [row["year"] for row in response.json()["data"]] == [2020, 2022]

    response = await client.get("/vehicle/get-all", params={"make": "ma"})
    makes = {row["make"] for row in response.json()["data"]}
    assert makes == {"Maruti", "Mahindra"}
