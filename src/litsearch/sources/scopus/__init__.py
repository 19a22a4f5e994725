"""Elsevier Scopus adapter."""

from .adapter import ScopusAdapter

__all__ = ["ScopusAdapter"]
