"""Module manager for fetchkit.

Loads Python modules on demand and hands back their exports by id.
"""

from typing import Any, Dict, List, Optional, Union

from fetchkit.core.errors import ModuleLoadError
from fetchkit.core.logging import logger
from fetchkit.core.modules.module import Module

UNPACK_MODES = ("exports", "namespace", "module")


class ModuleManager:
    """Registry of dynamically loaded modules.

    ``unpack`` controls what ``load()``/``get()`` return:
    - ``exports`` (default): the module's ``default`` attribute if it has
      one, otherwise the module itself
    - ``namespace``: the module object
    - ``module``: the Module wrapper
    """

    def __init__(self, net: Any = None):
        self.net = net
        self.modules: Dict[str, Module] = {}

    def load(
        self,
        id: str,
        source: Union[str, Dict[str, Any]],
        reload: bool = False,
        unpack: str = "exports",
    ) -> Any:
        """Register and import a module.

        Args:
            id: Unique module id
            source: Dotted module name, ``.py`` path, or a dict of Module
                keyword arguments (``path``, ``version``, ``meta``, ``exports``)
            reload: Re-import even if ``id`` is already loaded
            unpack: See class docstring

        Raises:
            ModuleLoadError: On invalid input or import failure
        """
        if id in self.modules and not reload:
            logger.warning("module_already_loaded", module_id=id)
            return self.get(id, unpack=unpack)

        if isinstance(source, dict):
            module = Module(id=id, **source)
        elif isinstance(source, str):
            module = Module(id=id, path=source)
        else:
            raise ModuleLoadError(f"ModuleManager.load: invalid source for {id!r}")

        self.modules[id] = module
        try:
            module.load()
        except ModuleLoadError:
            del self.modules[id]
            raise

        logger.info("module_loaded", module_id=id, path=module.path, version=module.version)
        return self.get(id, unpack=unpack)

    def get(self, id: str, unpack: str = "exports") -> Optional[Any]:
        module = self.modules.get(id)
        if module is None or not module.loaded:
            return None

        if unpack == "module":
            return module
        if unpack == "exports":
            return getattr(module.namespace, "default", module.namespace)
        return module.namespace

    def list(self) -> List[str]:
        """Ids of loaded modules."""
        return list(self.modules)
