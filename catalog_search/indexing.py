"""Index creation and single-item maintenance helpers."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from elasticsearch.exceptions import NotFoundError

from .config import settings
from .errors import EngineError
from .gateway import IndexGateway
from .models import Item

logger = logging.getLogger(__name__)


def _load_mapping(mapping_path: Path) -> dict:
    with mapping_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


async def create_index(gateway: IndexGateway, mapping_path: str | Path | None = None) -> None:
    """Create the products index; fails with ``EngineError`` if it already exists."""

    path = Path(mapping_path or settings.mapping_path)
    body = _load_mapping(path)
    logger.info("Creating index %s using %s", gateway.index, path)
    await gateway.run(gateway.client.indices.create, index=gateway.index, body=body)


async def ensure_index(gateway: IndexGateway) -> bool:
    """Create the index if it is missing. Returns ``True`` when it was created."""

    exists = await gateway.run(gateway.client.indices.exists, index=gateway.index)
    if exists:
        return False
    try:
        await create_index(gateway)
    except EngineError as exc:
        if "resource_already_exists_exception" in exc.debug:
            logger.info("Index %s already exists", gateway.index)
            return False
        raise
    return True


async def index_item(gateway: IndexGateway, item: Item) -> None:
    await gateway.run(
        gateway.client.index,
        index=gateway.index,
        id=item.id,
        document=item.model_dump(),
        refresh="wait_for",
    )
    logger.info("Indexed item id=%s category=%s", item.id, item.category)


async def count_documents(gateway: IndexGateway) -> int:
    try:
        stats = await gateway.run(gateway.client.count, index=gateway.index)
    except EngineError as exc:
        if isinstance(exc.__cause__, NotFoundError):
            return 0
        raise
    return int(stats.get("count", 0))


async def cluster_status(gateway: IndexGateway) -> str | None:
    health = await gateway.run(gateway.client.cluster.health)
    return health.get("status")
