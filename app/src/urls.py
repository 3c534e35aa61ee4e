"""
API Endpoint URL Constants

This module defines the URL paths used throughout the application
for accessing the users, drivers, vehicles and schools resources.

These URLs are relative paths and are typically prefixed by the
service base URL when making requests.
"""

# -------------------------------
# Users
# -------------------------------
URL_USER_CREATE = "/users/create"
URL_USER_LIST = "/users/get-all"

# -------------------------------
# Drivers
# -------------------------------
URL_DRIVER_CREATE = "/driver/create"
URL_DRIVER_LIST = "/driver/get-all"

# -------------------------------
# Vehicles
# -------------------------------
URL_VEHICLE_CREATE = "/vehicle/create"
URL_VEHICLE_LIST = "/vehicle/get-all"

# -------------------------------
# Schools
# -------------------------------
URL_SCHOOL_CREATE = "/school/create"
URL_SCHOOL_LIST = "/school/get-filtered"
