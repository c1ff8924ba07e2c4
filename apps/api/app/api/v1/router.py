from fastapi import APIRouter

from app.api.v1.admin import router as admin_router
from app.api.v1.auth import router as auth_router
from app.api.v1.events import router as events_router
from app.api.v1.me import router as me_router
from app.api.v1.registrations import router as registrations_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(me_router)
router.include_router(registrations_router)
router.include_router(events_router)
router.include_router(admin_router)
