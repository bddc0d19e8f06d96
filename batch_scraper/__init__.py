"""Batch web scraping service backed by a headless browser."""

__version__ = "1.0.0"
