"""litsearch CLI: initialize storage, run searches, inspect and prune history.

Usage examples:
- litsearch db-init
- litsearch search "deep learning" --start-year 2020 --max 50
- litsearch history
- litsearch export 3 --out results/search_3.json
- litsearch forget 3
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..config import DEFAULT_CONFIG_PATH, enabled_sources, load_config, validate_config
from .commands import db, export, forget, history, search

console = Console()


def cmd_config_validate(args: argparse.Namespace) -> int:
	config_path = Path(args.config)
	try:
		data = load_config(config_path)
		validate_config(data)
		table = Table(title="litsearch Config Summary")
		table.add_column("Field")
		table.add_column("Value")
		table.add_row("config_path", str(config_path))
		table.add_row("sources", ", ".join(enabled_sources(data)) or "-")
		database = data.get("database") or {}
		table.add_row("database", str(database.get("url") or database.get("path") or "default"))
		table.add_row("journal_categories", str((data.get("paths") or {}).get("journal_categories") or "-"))
		console.print(table)
		console.print("[green]Config validation passed.[/green]")
		return 0
	except Exception as e:
		console.print(f"[red]Config validation failed:[/red] {e}")
		return 1


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="litsearch", description="Multi-source literature search")
	parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
	sub = parser.add_subparsers(dest="command")

	p_validate = sub.add_parser("config-validate", help="Validate and summarize a config.yaml")
	p_validate.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to config.yaml")
	p_validate.set_defaults(func=cmd_config_validate)

	db.register(sub)
	search.register(sub)
	history.register(sub)
	export.register(sub)
	forget.register(sub)
	return parser


def main(argv: Any = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	if not hasattr(args, "func"):
		parser.print_help()
		return 0
	return int(args.func(args))


if __name__ == "__main__":
	sys.exit(main())
