"""Dynamic module loading for fetchkit."""

from fetchkit.core.modules.manager import ModuleManager
from fetchkit.core.modules.module import Module

__all__ = ["Module", "ModuleManager"]
