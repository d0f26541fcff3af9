"""API specification support for fetchkit."""

from fetchkit.core.specs.base import AbstractSpec
from fetchkit.core.specs.loaders import LOADERS, AutoLoader, OpenAPILoader
from fetchkit.core.specs.manager import SpecManager
from fetchkit.core.specs.openapi import OpenAPISpec

__all__ = [
    "AbstractSpec",
    "OpenAPISpec",
    "OpenAPILoader",
    "AutoLoader",
    "LOADERS",
    "SpecManager",
]
