from fastapi import APIRouter
from app.api import user, driver, vehicle, school


# ------------------------------------------------------
# Entity routers
# ------------------------------------------------------
route_api = APIRouter()

route_api.include_router(user.route_user, prefix="/users")
route_api.include_router(driver.route_driver, prefix="/driver")
route_api.include_router(vehicle.route_vehicle, prefix="/vehicle")
route_api.include_router(school.route_school, prefix="/school")
