"""Bulk-loads synthetic catalog items, e.g. for demos and local development."""
from __future__ import annotations

import logging
import random
from typing import Iterable, List

from elasticsearch import helpers
from elasticsearch.helpers import BulkIndexError

from .config import settings
from .errors import EngineError
from .gateway import IndexGateway
from .models import Item

logger = logging.getLogger(__name__)

ADJECTIVES = ("Premium", "Basic", "Deluxe", "Compact", "Smart", "Classic", "Rugged")
CATALOG = {
    "tools": ("Widget", "Wrench", "Drill"),
    "electronics": ("Gadget", "Speaker", "Charger"),
    "home": ("Lamp", "Kettle", "Blanket"),
    "outdoor": ("Tent", "Lantern", "Backpack"),
}


def generate_items(count: int, random_state: int | None = None) -> List[Item]:
    """Deterministic synthetic items named like ``"Premium Widget 1"``."""
    rng = random.Random(settings.seed_random_state if random_state is None else random_state)
    categories = list(CATALOG)
    items: List[Item] = []
    for number in range(1, count + 1):
        position = number - 1
        adjective = ADJECTIVES[position % len(ADJECTIVES)]
        category = categories[position % len(categories)]
        nouns = CATALOG[category]
        noun = nouns[(position // len(categories)) % len(nouns)]
        items.append(
            Item(
                id=f"seed-{number:05d}",
                name=f"{adjective} {noun} {number}",
                description=f"A {adjective.lower()} {noun.lower()} for everyday {category} use.",
                category=category,
                price=round(rng.uniform(1, 500), 2),
            )
        )
    return items


def _iter_actions(index: str, items: Iterable[Item]) -> Iterable[dict]:
    for item in items:
        yield {
            "_index": index,
            "_id": item.id,
            "_source": item.model_dump(),
        }


def _bulk(gateway: IndexGateway, actions: List[dict]) -> int:
    try:
        indexed, _ = helpers.bulk(gateway.client, actions, refresh="wait_for")
    except BulkIndexError as exc:
        raise EngineError("validation", f"{len(exc.errors)} items failed to index", repr(exc.errors[:5])) from exc
    return indexed


async def seed_items(gateway: IndexGateway, count: int | None = None) -> int:
    items = generate_items(count if count is not None else settings.seed_count)
    if not items:
        return 0
    actions = list(_iter_actions(gateway.index, items))
    indexed = await gateway.run(_bulk, gateway, actions)
    logger.info("Seeded %s synthetic items into %s", indexed, gateway.index)
    return indexed
