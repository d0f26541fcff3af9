"""Transport options accepted by fetchkit.core.http.HTTP.

``FETCH_CONSTANTS`` maps each option that is forwarded to httpx per request
to its allowed values. An empty tuple accepts any value.
"""

from typing import Any, Dict, Mapping

FETCH_CONSTANTS: Dict[str, tuple] = {
    "follow_redirects": (True, False),
    # arbitrary cookie mappings
    "cookies": (),
    # httpx request extensions (trace hooks, sni_hostname, ...)
    "extensions": (),
}


def build_fetch_opts(defaults: Mapping[str, Any], opts: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge per-request options over defaults, keeping only allowed values.

    Args:
        defaults: Class or instance level defaults
        opts: Per-request options (other keys are ignored here)

    Returns:
        Dict of keyword arguments safe to pass to ``httpx.AsyncClient.request``
    """
    out = {}

    for key, allowed in FETCH_CONSTANTS.items():
        value = opts[key] if key in opts else defaults.get(key)
        if value is None:
            continue
        if allowed and value not in allowed:
            continue
        out[key] = value

    return out
