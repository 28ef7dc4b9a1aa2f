"""Field enrichment."""

from .enricher import dictionary_key, enrich_row, enrich_rows, is_omitted

__all__ = ["dictionary_key", "enrich_row", "enrich_rows", "is_omitted"]
