"""Catalog file loaders for different formats."""

from __future__ import annotations
from typing import Dict, Any
from pathlib import Path

from .base import CatalogReader


class TomlReader(CatalogReader):
    """Reader for TOML catalog files."""
    
    def can_read(self, path: Path) -> bool:
        """Check if file has .toml extension."""
        return path.suffix.lower() == ".toml"
    
    def read(self, path: Path) -> Dict[str, Any]:
        """Read TOML file."""
        try:
            import tomllib
        except ImportError:
            import tomli as tomllib
            
        with open(path, "rb") as f:
            return tomllib.load(f)


class JsonReader(CatalogReader):
    """Reader for JSON catalog files."""
    
    def can_read(self, path: Path) -> bool:
        """Check if file has .json extension."""
        return path.suffix.lower() == ".json"
    
    def read(self, path: Path) -> Dict[str, Any]:
        """Read JSON file."""
        import json
        with open(path, "r") as f:
            return json.load(f)
