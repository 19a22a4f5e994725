"""CLI command: create the schema and seed the canonical portals."""

from __future__ import annotations

import argparse
import logging

from ._common import add_storage_args, load_optional_config, open_store

logger = logging.getLogger(__name__)


def register(sub) -> None:
    p = sub.add_parser("db-init", help="Create tables and seed portals")
    add_storage_args(p)

    def _cmd(args: argparse.Namespace) -> int:
        from rich.console import Console
        from ...store import seed_portals

        console = Console()
        try:
            data = load_optional_config(args)
            engine, SessionLocal = open_store(args, data)
        except Exception as e:
            console.print(f"[red]Could not open database:[/red] {e}")
            return 1

        session = SessionLocal()
        try:
            added = seed_portals(session)
        finally:
            session.close()
        console.print(f"[green]Initialized DB:[/green] {engine.url.render_as_string(hide_password=True)}")
        if added:
            console.print(f"[cyan]Portals added: {', '.join(added)}[/cyan]")
        return 0

    p.set_defaults(func=_cmd)
