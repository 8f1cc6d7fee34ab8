"""Campaign dossier: dual-layer character records and tag library."""

__version__ = "0.1.0"
