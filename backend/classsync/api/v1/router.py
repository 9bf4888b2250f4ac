from fastapi import APIRouter

from .auth import router as auth_router
from .content import router as content_router
from .media import router as media_router
from .seating import router as seating_router
from .system import router as system_router
from .tutor_events import router as tutor_events_router
from .users import router as users_router

router = APIRouter()

router.include_router(system_router)
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(content_router)
router.include_router(media_router)
router.include_router(seating_router)
router.include_router(tutor_events_router)
