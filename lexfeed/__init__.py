"""Legal news and CJEU judgment ingestion pipeline."""

__version__ = "0.1.0"
