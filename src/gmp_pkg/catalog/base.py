"""Base catalog classes and interfaces."""

from __future__ import annotations
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional, Union
from pathlib import Path

import structlog
from pydantic import BaseModel

from ..contracts.errors import CatalogError
from ..domain.entities import Meal, ModelParameters

logger = structlog.get_logger()


class CatalogReader(ABC):
    """Abstract base for catalog data readers."""

    @abstractmethod
    def can_read(self, path: Path) -> bool:
        """Check if this reader can handle the given file."""
        pass

    @abstractmethod
    def read(self, path: Path) -> Dict[str, Any]:
        """Read catalog data from file."""
        pass


class ReadOnlyCatalog:
    """Read-only catalog for entity lookup and listing.

    The catalog loads entity definitions from data files under
    ``<search_path>/<category>/`` and validates each one against its entity
    schema. Later search paths override earlier ones on name clashes.
    """

    def __init__(self, search_paths: List[Union[str, Path]], readers: Optional[List[CatalogReader]] = None):
        """Initialize catalog with search paths.

        Args:
            search_paths: Directories to search for catalog files
            readers: Optional list of file readers (defaults to TOML and JSON)
        """
        from .loaders import TomlReader, JsonReader
        self.search_paths = [Path(p) for p in search_paths]
        self.readers = readers or [TomlReader(), JsonReader()]
        self._cache: Dict[str, Dict[str, BaseModel]] = {}

        self._entity_types = {
            "parameters": ModelParameters,
            "meals": Meal,
        }

        self._load_all()

    def _load_all(self) -> None:
        """Load all catalog entries from search paths."""
        self._cache = {category: {} for category in self._entity_types}

        for search_path in self.search_paths:
            if not search_path.exists():
                continue

            for category in self._entity_types:
                category_path = search_path / category
                if category_path.is_dir():
                    self._load_category(category, category_path)

    def _load_category(self, category: str, category_path: Path) -> None:
        """Load all files in a category directory."""
        entity_cls = self._entity_types[category]

        for file_path in sorted(category_path.iterdir()):
            if not file_path.is_file():
                continue
            reader = self._find_reader(file_path)
            if reader is None:
                continue
            try:
                data = reader.read(file_path)
                self._cache[category][file_path.stem] = entity_cls.model_validate(data)
            except Exception as e:
                # Skip the broken entry, keep the rest of the catalog usable
                logger.warning("Failed to load catalog entry", path=str(file_path), error=str(e))

    def _find_reader(self, path: Path) -> Optional[CatalogReader]:
        """Find a compatible reader for the given file."""
        for reader in self.readers:
            if reader.can_read(path):
                return reader
        return None

    def _check_category(self, category: str) -> None:
        if category not in self._entity_types:
            raise CatalogError(
                f"Unknown category: {category}",
                {"available": self.list_categories()},
            )

    def list_categories(self) -> List[str]:
        """List all available entity categories."""
        return list(self._entity_types.keys())

    def list_entries(self, category: str) -> List[str]:
        """List all entries in a category.

        Raises:
            CatalogError: If category is not recognized
        """
        self._check_category(category)
        return sorted(self._cache[category].keys())

    def get_entry(self, category: str, name: str) -> BaseModel:
        """Get a specific catalog entry.

        Raises:
            CatalogError: If category or entry name is not found
        """
        self._check_category(category)
        if name not in self._cache[category]:
            raise CatalogError(
                f"Entry '{name}' not found in category '{category}'",
                {"available": self.list_entries(category)},
            )
        return self._cache[category][name]

    def has_entry(self, category: str, name: str) -> bool:
        return category in self._cache and name in self._cache[category]

    def get_stats(self) -> Dict[str, int]:
        """Get catalog statistics.

        Returns:
            Dictionary mapping category names to entry counts
        """
        return {category: len(entities)
                for category, entities in self._cache.items()}


def get_default_catalog() -> ReadOnlyCatalog:
    """Get default catalog with built-in and user search paths."""
    search_paths: List[Path] = [Path(__file__).parent / "builtin"]

    env_path = os.environ.get("GMP_CATALOG_PATH")
    if env_path:
        search_paths.append(Path(env_path))

    user_catalog = Path.home() / ".gmp" / "catalog"
    if user_catalog.exists():
        search_paths.append(user_catalog)

    return ReadOnlyCatalog(search_paths)
