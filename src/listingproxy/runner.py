"""Command-line entry point.

Run via: python -m listingproxy.runner <command>
    serve     run the proxy API with uvicorn
    refresh   fetch all listings once and persist them to the snapshot file
    export    pull the joined table from a running proxy and write a CSV
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from .collectors import BuildoutClient, UpstreamError
from .config import config
from .models.listing import CacheSnapshot, Listing
from .storage import SnapshotStore
from .views import FilterSortState, SortKey, load_views, write_csv

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


async def run_refresh() -> int:
    """Fetch every listing page and persist the snapshot.

    Returns:
        Process exit code
    """
    async with BuildoutClient(
        config.api_base_url,
        page_size=config.page_size,
        timeout=config.request_timeout,
    ) as client:
        try:
            records = await client.fetch_listings()
            listings = tuple(Listing.model_validate(r) for r in records)
        except UpstreamError as e:
            console.print(f"[red]Refresh failed:[/red] {e}")
            return 1
        except ValidationError as e:
            console.print(f"[red]Upstream returned invalid listings:[/red] {e.error_count()} error(s)")
            return 1

    snapshot = CacheSnapshot(listings=listings, last_updated=datetime.now(timezone.utc))
    SnapshotStore(config.listings_path).save(snapshot)
    console.print(f"[green]Saved {snapshot.count} listings to {config.listings_path}[/green]")
    return 0


async def run_export(
    output: Path,
    search: str = "",
    type_filter: str = "",
    sort: str | None = None,
    descending: bool = False,
) -> int:
    """Export the proxy's joined, filtered and sorted table to CSV."""
    views = await load_views(config.proxy_url)
    state = FilterSortState(text_query=search, type_filter=type_filter)
    if sort:
        state.toggle_sort(sort)
        if descending:
            state.toggle_sort(sort)

    rows = state.apply(views)
    if not rows:
        console.print("[yellow]No listings to export.[/yellow]")
        return 1

    count = write_csv(rows, output)
    console.print(f"[green]Exported {count} listings to {output}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="listingproxy", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the proxy API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=config.port)

    sub.add_parser("refresh", help="Fetch and persist all listings once")

    export = sub.add_parser("export", help="Export the listing table to CSV")
    export.add_argument("output", type=Path, help="CSV file to write")
    export.add_argument("--search", default="", help="Text filter")
    export.add_argument("--type", dest="type_filter", default="", help="Property type id")
    export.add_argument("--sort", choices=[k.value for k in SortKey], help="Sort column")
    export.add_argument("--desc", action="store_true", help="Sort descending")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("backend.app.main:app", host=args.host, port=args.port, log_config=None)
        return 0
    if args.command == "refresh":
        return asyncio.run(run_refresh())
    return asyncio.run(
        run_export(args.output, args.search, args.type_filter, args.sort, args.desc)
    )


if __name__ == "__main__":
    sys.exit(main())
