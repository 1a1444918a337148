"""Catalog of named parameter sets and meals."""

from .base import ReadOnlyCatalog, CatalogReader, get_default_catalog
from .loaders import TomlReader, JsonReader

__all__ = [
    "ReadOnlyCatalog",
    "CatalogReader",
    "get_default_catalog",
    "TomlReader",
    "JsonReader",
]
