"""Catalog of local image-collection folders with keyword and similar-title search."""

__version__ = "0.1.0"
