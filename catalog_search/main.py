"""FastAPI application wiring the search gateway."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import CacheBackend, get_cache
from .config import settings
from .errors import ENGINE_ERROR_HEADER, EngineError, ValidationError
from .es_client import get_client
from .gateway import IndexGateway
from .indexing import cluster_status, count_documents, create_index, ensure_index, index_item
from .models import Item, SearchResult
from .search_service import SearchService
from .seeding import seed_items

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# Force a predictable logging setup even when run under uvicorn so the timing
# lines from the search service are visible. ``force=True`` replaces uvicorn's
# default handlers.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Catalog Search Gateway")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_gateway() -> IndexGateway:
    return IndexGateway(get_client(), settings.es_index)


def get_suggestion_cache() -> CacheBackend | None:
    return get_cache() if settings.cache_ttl_seconds > 0 else None


def get_search_service(
    gateway: IndexGateway = Depends(get_gateway),
    cache: CacheBackend | None = Depends(get_suggestion_cache),
) -> SearchService:
    return SearchService(gateway, cache=cache)


def _require_query(query: str | None) -> str:
    if query is None:
        raise ValidationError("query parameter is required")
    return query


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    logger.warning("%s %s failed kind=%s: %s", request.method, request.url.path, exc.kind, exc.debug)
    return JSONResponse(status_code=400, content={"detail": exc.debug}, headers={ENGINE_ERROR_HEADER: exc.kind})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.on_event("startup")
async def startup_event() -> None:
    if not settings.ensure_index_on_startup:
        return
    gateway = get_gateway()
    if await ensure_index(gateway):
        logger.info("Created index %s on startup", gateway.index)
    if settings.seed_on_startup and await count_documents(gateway) == 0:
        seeded = await seed_items(gateway, settings.seed_count)
        logger.info("Seeded %s items on startup", seeded)


@app.get("/health")
async def health(gateway: IndexGateway = Depends(get_gateway)) -> dict:
    try:
        status = await cluster_status(gateway)
        documents = await count_documents(gateway)
    except EngineError as exc:
        return {"elasticsearch": "unavailable", "index": gateway.index, "error": exc.kind}
    return {"elasticsearch": status, "index": gateway.index, "documents": documents}


@app.get("/search", response_model=SearchResult)
async def search(
    query: str | None = Query(None, description="Free-text search query"),
    service: SearchService = Depends(get_search_service),
) -> SearchResult:
    return await service.search(_require_query(query))


@app.get("/suggest", response_model=List[str])
async def suggest(
    query: str | None = Query(None, description="Autocomplete prefix"),
    service: SearchService = Depends(get_search_service),
) -> List[str]:
    return await service.suggest(_require_query(query))


@app.post("/create-index")
async def create_index_endpoint(service: SearchService = Depends(get_search_service)) -> str:
    await create_index(service.gateway)
    service.invalidate()
    return "Index created"


@app.post("/ingest")
async def ingest(item: Item, service: SearchService = Depends(get_search_service)) -> str:
    await index_item(service.gateway, item)
    service.invalidate()
    return "Product indexed"


@app.post("/seed")
async def seed(
    count: int = Query(settings.seed_count, ge=1, le=10_000),
    service: SearchService = Depends(get_search_service),
) -> dict:
    indexed = await seed_items(service.gateway, count)
    service.invalidate()
    return {"indexed": indexed}


def serve() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
