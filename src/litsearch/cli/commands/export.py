"""CLI command: export the publications of one search run as JSON."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from ._common import add_storage_args, load_optional_config, open_store


def register(sub) -> None:
    p = sub.add_parser("export", help="Export a search run's publications to JSON")
    p.add_argument("search_id", type=int)
    p.add_argument("--out", default=None, help="Output file (default: stdout)")
    add_storage_args(p)

    def _cmd(args: argparse.Namespace) -> int:
        from rich.console import Console

        from ...store.searches import export_search

        console = Console()
        engine, SessionLocal = open_store(args, load_optional_config(args))
        session = SessionLocal()
        try:
            items = export_search(session, args.search_id)
        finally:
            session.close()

        payload = json.dumps(items, indent=2, ensure_ascii=False)
        if args.out:
            Path(args.out).parent.mkdir(parents=True, exist_ok=True)
            Path(args.out).write_text(payload, encoding="utf-8")
            console.print(f"[green]Exported {len(items)} publication(s) to {args.out}[/green]")
        else:
            print(payload)
        return 0

    p.set_defaults(func=_cmd)
