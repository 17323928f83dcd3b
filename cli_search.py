"""Terminal client for the catalog search gateway.

By default it reuses the in-process search logic; ``--remote`` talks to a
running gateway over HTTP instead. The interactive shell drives a
:class:`RequestCoordinator`, so typed prefixes go through the same debounce
and supersession rules as a browser client.
"""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable

from catalog_search.client import HttpSearchBackend
from catalog_search.config import settings
from catalog_search.coordinator import RequestCoordinator, SearchBackend
from catalog_search.errors import EngineError
from catalog_search.es_client import get_client
from catalog_search.gateway import IndexGateway
from catalog_search.models import SearchResult
from catalog_search.search_service import SearchService

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"

SHELL_HELP = """Interactive catalog search. Commands:
  ?<text>   show suggestions for <text>
  !<n>      search for suggestion number <n>
  <text>    search for <text>
  exit      quit"""


def make_backend(remote: str | None) -> SearchBackend:
    if remote:
        return HttpSearchBackend(remote)
    return SearchService(IndexGateway(get_client(), settings.es_index))


def pretty_print_result(query: str, result: SearchResult) -> None:
    took = result.took_ms
    color = GREEN if took < 200 else RED
    print(f"Query: {query!r} | hits: {len(result.hits)} of {result.total} | took: {color}{took:.1f} ms{RESET}")
    for idx, hit in enumerate(result.hits, start=1):
        print(f"  {idx:02d}. {hit.display.get('name', hit.source.name)} | {hit.source.category} | ${hit.source.price:.2f}")
        description = hit.display.get("description") or hit.source.description
        if description:
            print(f"      {description}")
    categories = ", ".join(f"{bucket.key}={bucket.docCount}" for bucket in result.aggregations.categories)
    stats = result.aggregations.priceStats
    print(f"  categories: {categories or '-'}")
    print(f"  price: min={stats.min:.2f} avg={stats.avg:.2f} max={stats.max:.2f} count={stats.count}")


def pretty_print_suggestions(prefix: str, names: list[str]) -> None:
    print(f"Suggestions for {prefix!r}:")
    if not names:
        print("  (none)")
    for idx, name in enumerate(names, start=1):
        print(f"  {idx}. {name}")


async def run_search(backend: SearchBackend, query: str) -> None:
    try:
        result = await backend.search(query)
    except EngineError as exc:
        print(f"{RED}search failed ({exc.kind}): {exc.debug}{RESET}")
        return
    pretty_print_result(query, result)


async def run_suggest(backend: SearchBackend, prefix: str) -> None:
    try:
        names = await backend.suggest(prefix)
    except EngineError as exc:
        print(f"{RED}suggest failed ({exc.kind}): {exc.debug}{RESET}")
        return
    pretty_print_suggestions(prefix, names)


async def interactive_shell(backend: SearchBackend) -> None:
    coordinator = RequestCoordinator(backend)
    print(SHELL_HELP)
    try:
        while True:
            try:
                line = (await asyncio.to_thread(input, "> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print()
                return
            if line.lower() in {"exit", "quit"}:
                return
            if line.startswith("?"):
                coordinator.on_input(line[1:])
                await coordinator.settle()
                pretty_print_suggestions(coordinator.text, coordinator.suggestions)
                continue
            if line.startswith("!") and line[1:].isdigit():
                position = int(line[1:]) - 1
                if not 0 <= position < len(coordinator.suggestions):
                    print("No such suggestion")
                    continue
                await coordinator.select_suggestion(coordinator.suggestions[position])
            else:
                await coordinator.submit(line)
            if coordinator.search_error is not None:
                print(f"{RED}search failed ({coordinator.search_error.kind}); showing previous results{RESET}")
            if coordinator.result is not None:
                pretty_print_result(coordinator.text, coordinator.result)
    finally:
        coordinator.close()


async def batch_mode(backend: SearchBackend, file_path: Path) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            await run_search(backend, query)


async def _main(args: argparse.Namespace) -> int:
    backend = make_backend(args.remote)
    try:
        if args.batch:
            await batch_mode(backend, args.batch)
        elif args.suggest is not None:
            await run_suggest(backend, args.suggest)
        elif args.query is not None:
            await run_search(backend, args.query)
        else:
            await interactive_shell(backend)
    finally:
        if isinstance(backend, HttpSearchBackend):
            await backend.aclose()
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the catalog search gateway")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--suggest", metavar="PREFIX", help="Print autocomplete suggestions for PREFIX")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--remote", metavar="URL", help="Use a running gateway at URL instead of in-process search")
    args = parser.parse_args(list(argv) if argv is not None else None)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
