"""Error definitions for the GMP package."""

from __future__ import annotations
from typing import Dict, Optional


class GMPError(Exception):
    """Base exception for all GMP package errors."""
    
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(GMPError):
    """Configuration-related errors."""
    pass


class ValidationError(ConfigError):
    """Input validation errors."""
    pass


class ModelError(GMPError):
    """Model execution errors."""
    pass


class CatalogError(GMPError, ValueError):
    """Unknown catalog category or entry."""
    pass
