"""API routes."""

from fastapi import APIRouter

from .chat import router as chat_router
from .conversations import router as conversations_router
from .system import health_router
from .system import router as system_router

API_PREFIX = "/api"

router = APIRouter()
router.include_router(health_router)
router.include_router(chat_router, prefix=API_PREFIX)
router.include_router(conversations_router, prefix=API_PREFIX)
router.include_router(system_router, prefix=API_PREFIX)
