from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ouilookup.config import load_config, registry_settings
from ouilookup.engine import LookupEngine
from ouilookup.errors import IndexNotReady, LoadError
from ouilookup.log import get_logger
from ouilookup.models import InvalidAddressFormat, LookupResult, RegistryStats

logger = get_logger("api")

_config = load_config()
_api_key = _config.get("web", {}).get("api_key")
settings = registry_settings(_config)

# Swapped wholesale on reload; never mutated in place.
engine = LookupEngine()


def _load_registry() -> None:
    try:
        engine.reload(settings.path, strict=settings.strict, delimiter=settings.delimiter)
    except LoadError as e:
        logger.error("registry unavailable: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _load_registry()
    yield


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="OUI Lookup", docs_url="/docs", redoc_url="/redoc", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    elapsed = (time.monotonic() - start) * 1000
    logger.info("%s %s %d (%.1fms)", request.method, request.url.path,
                response.status_code, elapsed)
    return response

# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

async def verify_api_key(
    authorization: Optional[str] = Header(default=None),
    token: Optional[str] = Query(default=None),
):
    if not _api_key:
        return
    bearer_token = None
    if authorization and authorization.startswith("Bearer "):
        bearer_token = authorization[7:]
    actual = bearer_token or token
    if not actual or actual != _api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class ResolveRequest(BaseModel):
    macs: List[str] = Field(min_length=1, max_length=1000)


class ReloadResponse(BaseModel):
    status: str
    stats: RegistryStats

# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/api/v1/resolve", response_model=LookupResult, dependencies=[Depends(verify_api_key)])
def resolve_one(mac: str):
    try:
        result = engine.resolve(mac)
    except IndexNotReady:
        raise HTTPException(status_code=503, detail="Registry not loaded")
    if isinstance(result, InvalidAddressFormat):
        raise HTTPException(status_code=400, detail=result.reason)
    return result


@app.post("/api/v1/resolve", response_model=List[LookupResult], dependencies=[Depends(verify_api_key)])
def resolve_batch(request: ResolveRequest):
    try:
        return engine.resolve_many(request.macs)
    except IndexNotReady:
        raise HTTPException(status_code=503, detail="Registry not loaded")


@app.get("/api/v1/registry", response_model=RegistryStats, dependencies=[Depends(verify_api_key)])
def registry_stats():
    try:
        return engine.index.stats()
    except IndexNotReady:
        raise HTTPException(status_code=503, detail="Registry not loaded")


@app.post("/api/v1/registry/reload", response_model=ReloadResponse, dependencies=[Depends(verify_api_key)])
def reload_registry():
    try:
        index = engine.reload(settings.path, strict=settings.strict, delimiter=settings.delimiter)
    except LoadError as e:
        logger.warning("reload failed, keeping current registry: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    return {"status": "reloaded", "stats": index.stats()}
