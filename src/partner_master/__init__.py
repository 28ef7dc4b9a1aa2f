"""Business-partner master record builder: fetch, enrich and join source tables."""

__version__ = "0.1.0"
