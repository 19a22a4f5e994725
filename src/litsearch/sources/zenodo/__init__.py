"""Zenodo records adapter."""

from .adapter import ZenodoAdapter

__all__ = ["ZenodoAdapter"]
