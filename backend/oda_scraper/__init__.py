"""Oda grocery scraper."""

__version__ = "1.0.0"
