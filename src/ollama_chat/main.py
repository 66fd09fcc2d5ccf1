"""Ollama chat server."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from the working directory the server is started from
env_path = Path(".env")
load_dotenv(env_path)

from ollama_chat import __version__  # noqa: E402
from ollama_chat.api import router  # noqa: E402
from ollama_chat.chat.locks import ConversationLocks  # noqa: E402
from ollama_chat.config import load_settings, load_system_prompt, setup_logging  # noqa: E402
from ollama_chat.db import Base, engine  # noqa: E402
from ollama_chat.llm import OllamaClient  # noqa: E402

logger = logging.getLogger(__name__)

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")


async def init_db() -> None:
    """Create tables if they do not exist yet."""
    database = engine.url.database
    if engine.dialect.name == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without a model endpoint
    settings = load_settings()
    setup_logging(settings.log_level)

    app.state.settings = settings
    app.state.system_prompt = load_system_prompt(settings.system_prompt_path)
    app.state.conversation_locks = ConversationLocks()

    await init_db()

    async with httpx.AsyncClient() as http_client:
        app.state.completion_client = OllamaClient(
            http_client,
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            timeout_s=settings.ollama_timeout_s,
        )
        logger.info("Serving model %s from %s", settings.ollama_model, settings.ollama_base_url)
        yield

    await engine.dispose()


app = FastAPI(title="Ollama Chat", version=__version__, lifespan=lifespan)

# Allow frontend to connect
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "ollama_chat.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8081")),
    )
