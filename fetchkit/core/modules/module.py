"""A dynamically imported Python module."""

import importlib
import importlib.util
import os
from types import ModuleType
from typing import Any, Dict, List, Optional

from fetchkit.core.errors import ModuleLoadError
from fetchkit.core.logging import logger


class Module:
    """One module loaded by id from a dotted name or a ``.py`` file path."""

    def __init__(
        self,
        id: str,
        path: str,
        version: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
        exports: Optional[List[str]] = None,
    ):
        if not id or not path:
            raise ModuleLoadError("Module requires both id and path")

        self.id = id
        self.path = path
        self.version = version
        self.meta = meta or {}
        self.export_keys = exports

        self.loaded = False
        self.namespace: Optional[ModuleType] = None

    @property
    def is_file(self) -> bool:
        return self.path.endswith(".py") or os.sep in self.path

    def load(self) -> ModuleType:
        if self.loaded:
            return self.namespace

        try:
            self.namespace = self._import_file() if self.is_file else importlib.import_module(self.path)
        except Exception as e:
            logger.error("module_load_failed", module_id=self.id, path=self.path, error=str(e))
            raise ModuleLoadError(f"Module {self.id!r}: failed to load from {self.path}: {e}") from e

        self.loaded = True
        return self.namespace

    def _import_file(self) -> ModuleType:
        name = f"fetchkit_dynamic_{self.id}"
        spec = importlib.util.spec_from_file_location(name, self.path)
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot build import spec for {self.path}")

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def exports(self) -> Dict[str, Any]:
        """Public names of the module, restricted to ``exports`` when given."""
        if self.namespace is None:
            return {}
        keys = self.export_keys or [k for k in vars(self.namespace) if not k.startswith("_")]
        return {k: getattr(self.namespace, k) for k in keys if hasattr(self.namespace, k)}
