"""Session store backend — FastAPI entry point.

Wires MongoStore into an app: the store is built at startup (TTL index
bootstrap included) and every session route saves through it.
"""
from contextlib import asynccontextmanager
from pathlib import Path
import logging
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import FastAPI, APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

# Load env before anything else
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / ".env")

from config.settings import get_settings
from config.validators import validate_startup_config
from core.logging_config import setup_logging
from core.database import get_session_collection, close_db
from core.exceptions import MongoStoreError
from mongostore.store import MongoStore, build_store
from sessions.registry import save_all

# ---- Setup logging ----
setup_logging()
logger = logging.getLogger(__name__)


# ---- Lifespan ----
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Session backend starting — env=%s", settings.ENV)
    validate_startup_config(settings)
    app.state.store = await build_store(settings, get_session_collection())
    logger.info("Session backend ready")
    yield
    await close_db()
    logger.info("Session backend shutdown complete")


# ---- App ----
app = FastAPI(
    title="MongoStore Sessions",
    version="0.1.0",
    lifespan=lifespan,
)

api_router = APIRouter(prefix="/api")


def _store(request: Request) -> MongoStore:
    return request.app.state.store


class SessionUpdate(BaseModel):
    values: Dict[str, Any] = Field(default_factory=dict)


@api_router.get("/health")
async def health():
    settings = get_settings()
    return {"status": "healthy", "env": settings.ENV, "version": "0.1.0"}


@api_router.get("/session")
async def read_session(request: Request):
    session = await _store(request).get(request, get_settings().SESSION_NAME)
    values = {k: v for k, v in session.values.items() if not k.startswith("_")}
    return {"is_new": session.is_new, "values": values}


@api_router.post("/session")
async def update_session(body: SessionUpdate, request: Request, response: Response):
    session = await _store(request).get(request, get_settings().SESSION_NAME)
    session.values.update(body.values)
    try:
        await save_all(request, response)
    except MongoStoreError as e:
        logger.warning("Session update rejected: name=%s code=%s", session.name, e.code)
        raise HTTPException(status_code=400, detail=e.message)
    return {"is_new": session.is_new, "saved": True}


@api_router.delete("/session")
async def delete_session(request: Request, response: Response):
    session = await _store(request).get(request, get_settings().SESSION_NAME)
    session.options.max_age = -1
    await save_all(request, response)
    logger.info("Session revoked: name=%s", session.name)
    return {"deleted": True}


app.include_router(api_router)
