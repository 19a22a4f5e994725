"""ArXiv Atom feed adapter."""

from .adapter import ArxivAdapter

__all__ = ["ArxivAdapter"]
