from fastapi import APIRouter
from slotbook.api.v1.routes.resources import router as resources_router
from slotbook.api.v1.routes.bookings import router as bookings_router
from slotbook.api.v1.routes.admin import router as admin_router
from slotbook.api.v1.routes.me import router as me_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(resources_router)
api_router.include_router(bookings_router)
api_router.include_router(admin_router)
api_router.include_router(me_router)
