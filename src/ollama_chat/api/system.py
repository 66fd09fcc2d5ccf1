"""Health and system info endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ollama_chat import __version__
from ollama_chat.api.deps import get_settings
from ollama_chat.config import Settings

router = APIRouter(tags=["system"])
health_router = APIRouter(tags=["system"])


class SystemInfo(BaseModel):
    model: str
    version: str


@health_router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/system_info", response_model=SystemInfo)
async def system_info(settings: Settings = Depends(get_settings)) -> SystemInfo:
    """Report the active model and service version."""
    return SystemInfo(model=settings.ollama_model, version=__version__)
