"""CLI command: run one search across the configured sources."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import threading
from pathlib import Path

from ._common import add_storage_args, open_store

logger = logging.getLogger(__name__)


def _dry_run(args: argparse.Namespace, data, cancel: threading.Event):
    """Query, merge and enrich without touching storage."""
    from ...config import build_adapters, category_paths
    from ...enrich import attach_categories, build_journal_index
    from ...pipeline import RetryingOrchestrator, clamp_batch_size
    from ...store.deduplication import clean
    from ...store.portals import StaticPortalResolver
    from ...utils.runlog import RunLog

    adapters = build_adapters(data, StaticPortalResolver(), only=args.source)
    runlog = RunLog()
    raw = RetryingOrchestrator(adapters).run(
        args.query, args.start_year, args.download_pdf, clamp_batch_size(args.max), cancel, runlog
    )
    records = clean(raw)
    paths = args.categories or category_paths(data)
    if paths:
        attach_categories(records, build_journal_index(paths))
    return records, runlog.lines


def install_interrupt_handler(cancel: threading.Event, notify=print):
    """Route Ctrl-C to `cancel` so adapters stop paging; a second Ctrl-C aborts.

    Returns the previous SIGINT handler for the caller to restore.
    """

    def _handler(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        cancel.set()
        notify("Cancelling search, keeping results collected so far (Ctrl-C again to abort)...")

    return signal.signal(signal.SIGINT, _handler)


def register(sub) -> None:
    p = sub.add_parser("search", help="Search all enabled sources and store the merged result")
    p.add_argument("query", help="Free-text query")
    p.add_argument("--start-year", type=int, default=None, help="Earliest publication year")
    p.add_argument("--max", type=int, default=100, help="Max results per source (clamped to 10..10000)")
    p.add_argument(
        "--source",
        action="append",
        choices=["pubmed", "arxiv", "zenodo", "scopus"],
        help="Restrict to a source (repeatable). Default: every enabled source",
    )
    p.add_argument("--categories", action="append", default=None, help="Category CSV file or folder (repeatable)")
    p.add_argument("--download-pdf", action="store_true", help="Download PDFs for page count and text")
    p.add_argument("--dry-run", action="store_true", help="Print merged results without writing to the database")
    p.add_argument("--out", default=None, help="Optional JSON file for the run result")
    add_storage_args(p)

    def _cmd(args: argparse.Namespace) -> int:
        from rich.console import Console
        from rich.table import Table

        from ...config import build_adapters, category_paths, load_config, validate_config
        from ...pipeline import format_publications, run_search
        from ...store.portals import PortalResolver

        console = Console()
        cancel = threading.Event()
        try:
            data = load_config(Path(args.config))
            validate_config(data, only=args.source)
            if not args.dry_run:
                engine, SessionLocal = open_store(args, data)
                adapters = build_adapters(data, PortalResolver(SessionLocal), only=args.source)
                if not adapters:
                    console.print("[red]No sources enabled.[/red]")
                    return 1
        except Exception as e:
            console.print(f"[red]Cannot start search:[/red] {e}")
            return 1

        previous_handler = install_interrupt_handler(cancel, notify=lambda m: console.print(f"[yellow]{m}[/yellow]"))
        try:
            if args.dry_run:
                records, logs = _dry_run(args, data, cancel)
                search_id = None
                summary = f"[green]Dry run: {len(records)} publication(s) after merge and cleaning[/green]"
            else:
                console.print(f"[cyan]Searching {len(adapters)} source(s) for \"{args.query}\"...[/cyan]")
                outcome = run_search(
                    SessionLocal,
                    adapters,
                    args.query,
                    args.start_year,
                    args.max,
                    category_paths=args.categories or category_paths(data),
                    cancel=cancel,
                    download_pdf=args.download_pdf,
                )
                records, logs, search_id = outcome.publications, outcome.logs, outcome.search_id
                summary = (
                    f"[green]Stored {len(outcome.report.succeeded)} publication(s) "
                    f"(new={outcome.report.created} updated={outcome.report.updated} "
                    f"failed={len(outcome.report.failed)})[/green]"
                )
        except KeyboardInterrupt:
            cancel.set()
            console.print("[yellow]Interrupted.[/yellow]")
            return 130
        except ValueError as e:
            console.print(f"[red]Cannot start search:[/red] {e}")
            return 1
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        table = Table(title=f"Search {search_id}" if search_id is not None else "Dry run")
        table.add_column("Portal")
        table.add_column("Year")
        table.add_column("DOI")
        table.add_column("Title")
        for rec in records[:20]:
            table.add_row(rec.portal_name or "-", str(rec.year or ""), rec.doi, rec.title[:80])
        console.print(table)
        console.print(summary)

        if args.out:
            payload = {"search_id": search_id, "publications": format_publications(records), "logs": logs}
            try:
                Path(args.out).parent.mkdir(parents=True, exist_ok=True)
                Path(args.out).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
                console.print(f"[green]Saved run result to {args.out}[/green]")
            except Exception as e:
                logger.error(f"Failed to save run result: {e}")
        return 0 if search_id is not None or args.dry_run else 1

    p.set_defaults(func=_cmd)
