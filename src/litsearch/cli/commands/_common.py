"""Arguments and wiring shared by the storage-backed subcommands."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any, Dict

from ...config import DEFAULT_CONFIG_PATH, get_engine_session, load_config


def add_storage_args(p) -> None:
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to config.yaml")
    p.add_argument("--db", default=None, help="Path to SQLite DB file (overrides config)")
    p.add_argument("--db-url", default=os.getenv("LITSEARCH_DB_URL"), help="SQLAlchemy DB URL")


def load_optional_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Config is optional for storage-only commands; a missing file means defaults."""
    path = Path(args.config)
    if not path.exists():
        return {}
    return load_config(path)


def open_store(args: argparse.Namespace, data: Dict[str, Any]):
    from ...store import init_db
    engine, SessionLocal = get_engine_session(data, db_url=args.db_url, db_path=args.db)
    init_db(engine)
    return engine, SessionLocal
