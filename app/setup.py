import argparse
from http import HTTPStatus
from requests import get, post

from app.src.urls import (
    URL_USER_CREATE,
    URL_USER_LIST,
    URL_DRIVER_CREATE,
    URL_DRIVER_LIST,
    URL_VEHICLE_CREATE,
    URL_VEHICLE_LIST,
    URL_SCHOOL_CREATE,
    URL_SCHOOL_LIST,
)
from app.src.db import sessionMaker, engine, ORMbase


# ----------------------------------- Project Setup -------------------------------------------#
def removeTables():
    session = sessionMaker()
    ORMbase.metadata.drop_all(engine)
    session.commit()
    print("* All tables deleted")
    session.close()


def createTables():
    session = sessionMaker()
    ORMbase.metadata.create_all(engine)
    session.commit()
    print("* All tables created")
    session.close()


def POST(URL: str, status_code: int = HTTPStatus.CREATED, **kwargs):
    response = post(URL, **kwargs)
    assert response.status_code == status_code, response.text
    return response


def testDB():
    # Base URL
    BASE_URL = "http://127.0.0.1:8080"

    # Create User
    userData = {
        "email": "ravi.kumar@example.com",
        "phoneNumber": "9876543210",
        "firstName": "Ravi",
        "lastName": "Kumar",
        "dateOfBirth": "1990-05-14",
        "gender": "male",
        "userType": "driver",
    }
    user = POST((BASE_URL + URL_USER_CREATE), json=userData)
    print("* Created user")
    userUUID = user.json()["data"]["uuid"]

    # Create Driver
    driverData = {
        "user_uuid": userUUID,
        "licenseNumber": "KL0120110012345",
        "licenseExpiryDate": "2035-12-31",
        "licenseImageUrl": "https://cdn.example.com/license/ravi.jpg",
        "aadharNumber": "123456789012",
        "aadharImageUrl": "https://cdn.example.com/aadhar/ravi.jpg",
        "panNumber": "ABCDE1234F",
        "emergencyContactName": "Meera Kumar",
        "emergencyContactPhone": "9123456780",
        "bankIfscCode": "SBIN0001234",
        "upiId": "ravi@okaxis",
    }
    driver = POST((BASE_URL + URL_DRIVER_CREATE), json=driverData)
    print("* Created driver")
    driverID = driver.json()["data"]["id"]

    # Create Vehicles
    vehicles = [
        {
            "vehicleType": "car",
            "registrationNumber": "KL 01 AB 1234",
            "make": "Maruti",
            "model": "Dzire",
            "year": 2021,
            "color": "White",
            "capacity": 4,
        },
        {
            "vehicleType": "van",
            "registrationNumber": "KL 01 CD 5678",
            "make": "Force",
            "model": "Traveller",
            "year": 2019,
            "color": "Yellow",
            "capacity": 12,
        },
    ]
    for vehicleData in vehicles:
        vehicleData.update(
            {
                "driverId": driverID,
                "rcImageUrl": "https://cdn.example.com/rc/vehicle.jpg",
                "insuranceCertUrl": "https://cdn.example.com/insurance/vehicle.pdf",
                "insuranceExpiryDate": "2027-03-31",
                "vehicleImageUrls": '["https://cdn.example.com/vehicle/front.jpg"]',
            }
        )
        POST((BASE_URL + URL_VEHICLE_CREATE), json=vehicleData)
    print("* Created vehicles")

    # Create School
    schoolData = {
        "name": "St. Mary's Public School",
        "code": "KL-TVM-001",
        "address": "Pattom, Thiruvananthapuram",
        "latitude": 8.5241,
        "longitude": 76.9366,
        "city": "Thiruvananthapuram",
        "state": "Kerala",
        "pincode": "695004",
        "email": "office@stmarys.example.com",
        "principalName": "Anna Thomas",
        "schoolType": "private",
        "boardType": "cbse",
        "startTime": "08:30",
        "endTime": "15:30",
        "workingDays": ["monday", "tuesday", "wednesday", "thursday", "friday"],
        "holidays": ["2026-12-25"],
    }
    POST((BASE_URL + URL_SCHOOL_CREATE), json=schoolData)
    print("* Created school")

    # Summary
    for name, url in [
        ("users", URL_USER_LIST),
        ("drivers", URL_DRIVER_LIST),
        ("vehicles", URL_VEHICLE_LIST),
        ("schools", URL_SCHOOL_LIST),
    ]:
        response = get(BASE_URL + url)
        print(f"* Total {name}: {response.json()['pagination']['total']}")


# Setup database
if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("-rm", action="store_true", help="remove tables")
    parser.add_argument("-cr", action="store_true", help="create tables")
    parser.add_argument("-test", action="store_true", help="add test data")
    args = parser.parse_args()

    if args.cr:
        createTables()
    if args.test:
        testDB()
    if args.rm:
        removeTables()
