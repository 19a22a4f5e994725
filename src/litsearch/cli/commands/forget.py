"""CLI command: delete a search run and the publications only it found."""

from __future__ import annotations

import argparse

from ._common import add_storage_args, load_optional_config, open_store


def register(sub) -> None:
    p = sub.add_parser("forget", help="Delete a search run and its exclusive publications")
    p.add_argument("search_id", type=int)
    add_storage_args(p)

    def _cmd(args: argparse.Namespace) -> int:
        from rich.console import Console

        from ...pipeline import forget_search

        console = Console()
        engine, SessionLocal = open_store(args, load_optional_config(args))
        outcome = forget_search(SessionLocal, args.search_id)
        if not outcome.found and not outcome.removed_results:
            console.print(f"[yellow]Search {args.search_id} not found.[/yellow]")
            return 1
        console.print(
            f"[green]Forgot search {args.search_id}: removed {outcome.removed_results} result(s), "
            f"{outcome.removed_publications} publication(s)[/green]"
        )
        return 0

    p.set_defaults(func=_cmd)
