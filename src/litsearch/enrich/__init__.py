"""Journal-category enrichment."""

from .categories import attach_categories, build_journal_index, parse_category_token

__all__ = ["attach_categories", "build_journal_index", "parse_category_token"]
