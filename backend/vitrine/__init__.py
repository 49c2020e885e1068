"""Vitrine: product and shopping-search scraping service."""

__version__ = "1.0.0"
