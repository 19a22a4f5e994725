"""CLI command: list past search runs."""

from __future__ import annotations

import argparse

from ._common import add_storage_args, load_optional_config, open_store


def register(sub) -> None:
    p = sub.add_parser("history", help="List past searches, newest first")
    p.add_argument("--limit", type=int, default=50)
    add_storage_args(p)

    def _cmd(args: argparse.Namespace) -> int:
        from rich.console import Console
        from rich.table import Table

        from ...store.searches import list_searches

        console = Console()
        engine, SessionLocal = open_store(args, load_optional_config(args))
        session = SessionLocal()
        try:
            rows = list_searches(session)[: args.limit]
        finally:
            session.close()

        table = Table(title="Search history")
        table.add_column("ID", justify="right")
        table.add_column("Date")
        table.add_column("Start year")
        table.add_column("Query")
        for row in rows:
            table.add_row(str(row["id"]), row["search_date"] or "", str(row["start_year"] or ""), row["query_text"])
        console.print(table)
        return 0

    p.set_defaults(func=_cmd)
