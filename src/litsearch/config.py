"""YAML configuration, environment overrides and object wiring for the CLI.

Secrets normally come from the environment; the YAML file only needs to say
which sources are enabled and where the database and category files live.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .constants import DEFAULT_TIMEOUT_SEC

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"
DEFAULT_DB_PATH = Path("data") / "litsearch.sqlite"

# (source, config key) -> environment variable
ENV_OVERRIDES = {
	("pubmed", "api_key"): "PUBMED_API_KEY",
	("zenodo", "api_key"): "ZENODO_API_KEY",
	("scopus", "api_key"): "SCOPUS_API_KEY",
	("scopus", "inst_token"): "SCOPUS_INST_TOKEN",
}

REQUIRED_CREDENTIALS = {
	"pubmed": ["api_key"],
	"arxiv": [],
	"zenodo": ["api_key"],
	"scopus": ["api_key", "inst_token"],
}


def load_config(config_path: Path) -> Dict[str, Any]:
	if not config_path.exists():
		raise FileNotFoundError(f"Config not found: {config_path}")
	with config_path.open("r", encoding="utf-8") as f:
		data = yaml.safe_load(f) or {}
	if not isinstance(data, dict):
		raise ValueError("Config root must be a mapping")
	return apply_env_overrides(data)


def apply_env_overrides(data: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
	environ = os.environ if environ is None else environ
	sources = data.setdefault("sources", {})
	if not isinstance(sources, dict):
		return data
	for (source, key), var in ENV_OVERRIDES.items():
		value = environ.get(var)
		if value:
			section = sources.get(source)
			if section is None:
				section = sources[source] = {}
			if isinstance(section, dict):
				section[key] = value
	db_url = environ.get("LITSEARCH_DB_URL")
	if db_url:
		data.setdefault("database", {})["url"] = db_url
	return data


def enabled_sources(data: Dict[str, Any]) -> List[str]:
	sources = data.get("sources") or {}
	return [name for name, section in sources.items() if (section or {}).get("enabled", True)]


def validate_config(data: Dict[str, Any], only: Optional[List[str]] = None) -> None:
	"""Check the source sections; with `only`, credentials are checked for those sources alone."""
	sources = data.get("sources")
	if not isinstance(sources, dict) or not sources:
		raise ValueError("sources must be a non-empty mapping")
	unknown = [name for name in sources if name not in REQUIRED_CREDENTIALS]
	if unknown:
		raise ValueError(f"Unknown sources: {', '.join(unknown)}")
	for name in enabled_sources(data):
		if only and name not in only:
			continue
		section = sources.get(name) or {}
		missing = [k for k in REQUIRED_CREDENTIALS[name] if not section.get(k)]
		if missing:
			raise ValueError(f"Source '{name}' is enabled but missing: {', '.join(missing)}")
	http = data.get("http") or {}
	if "timeout_sec" in http and (not isinstance(http["timeout_sec"], (int, float)) or http["timeout_sec"] <= 0):
		raise ValueError("http.timeout_sec must be a positive number")


def category_paths(data: Dict[str, Any]) -> List[str]:
	raw = (data.get("paths") or {}).get("journal_categories")
	if not raw:
		return []
	if isinstance(raw, (list, tuple)):
		return [str(p) for p in raw]
	return [str(raw)]


def get_engine_session(data: Dict[str, Any], db_url: Optional[str] = None, db_path: Optional[str] = None):
	"""Pick the engine: explicit URL, then explicit path, then config, then the default SQLite file."""
	from .store import create_engine_from_url, create_sqlite_engine
	database = data.get("database") or {}
	url = db_url or (None if db_path else database.get("url"))
	if url:
		return create_engine_from_url(url)
	path = Path(db_path or database.get("path") or DEFAULT_DB_PATH)
	path.parent.mkdir(parents=True, exist_ok=True)
	return create_sqlite_engine(path)


def build_adapters(data: Dict[str, Any], portal_resolver, only: Optional[List[str]] = None) -> list:
	"""Instantiate the enabled source adapters. Raises ValueError on missing credentials."""
	from .sources import ADAPTERS
	http = data.get("http") or {}
	common = {
		"timeout_sec": http.get("timeout_sec", DEFAULT_TIMEOUT_SEC),
		"user_agent": http.get("user_agent"),
	}
	sources = data.get("sources") or {}
	adapters = []
	for name in enabled_sources(data):
		if only and name not in only:
			continue
		section = dict(sources.get(name) or {})
		kwargs = {k: section[k] for k in REQUIRED_CREDENTIALS.get(name, []) if k in section}
		adapters.append(ADAPTERS[name](portal_resolver, **kwargs, **common))
		logger.debug(f"Source enabled: {name}")
	return adapters
