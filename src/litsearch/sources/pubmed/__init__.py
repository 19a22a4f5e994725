"""PubMed E-utilities adapter."""

from .adapter import PubMedAdapter

__all__ = ["PubMedAdapter"]
