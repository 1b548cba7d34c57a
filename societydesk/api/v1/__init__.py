"""V1 API router aggregation."""

from fastapi import APIRouter

from societydesk.api.v1.admin import router as admin_router
from societydesk.api.v1.auth import router as auth_router
from societydesk.api.v1.passwords import router as passwords_router
from societydesk.api.v1.societies import router as societies_router
from societydesk.api.v1.units import router as units_router
from societydesk.api.v1.users import router as users_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(societies_router)
v1_router.include_router(auth_router)
v1_router.include_router(passwords_router)
v1_router.include_router(admin_router)
v1_router.include_router(users_router)
v1_router.include_router(units_router)
