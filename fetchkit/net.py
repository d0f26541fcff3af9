"""Net: one entry point for fetchkit's network components.

Usage:
    >>> net = Net(url="https://api.example.com")
    >>> spec_id = await net.specs.load("/openapi.json")
    >>> items = await net.specs.call(spec_id, "listItems")
    >>> outcome = await net.batch.run([{"id": "cfg", "url": "/config.json"}])
"""

from typing import Any

from fetchkit.core.batch import BatchLoader
from fetchkit.core.http import HTTP
from fetchkit.core.modules import ModuleManager
from fetchkit.core.specs import AutoLoader, SpecManager


class Net:
    """Hub wiring HTTP, spec loading, module loading and batch requests.

    Attributes:
        http: HTTP client (keyword arguments are forwarded to it)
        loader: AutoLoader for spec documents
        specs: SpecManager for declarative API calls
        modules: ModuleManager for dynamic imports
        batch: BatchLoader for coordinated request batches
    """

    def __init__(self, **opts: Any):
        self.http = HTTP(**opts)
        self.loader = AutoLoader(self.http)
        self.specs = SpecManager(http=self.http, loader=self.loader)
        self.modules = ModuleManager(self)
        self.batch = BatchLoader(self.http)
