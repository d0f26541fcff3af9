"""HTTP transport for fetchkit."""

from fetchkit.core.http.client import HTTP, debug_handler
from fetchkit.core.http.options import FETCH_CONSTANTS, build_fetch_opts
from fetchkit.core.http.response import FullResponse

__all__ = ["HTTP", "FullResponse", "FETCH_CONSTANTS", "build_fetch_opts", "debug_handler"]
