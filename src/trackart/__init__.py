"""trackart - audio library ingestion and cover-art reconciliation."""

__version__ = "0.1.0"
