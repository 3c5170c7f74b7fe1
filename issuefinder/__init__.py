"""Catalog of repositories and issues with client-side filtering and pagination."""

__version__ = "1.0.0"
