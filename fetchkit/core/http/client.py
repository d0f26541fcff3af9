"""HTTP client for fetchkit.

Thin async wrapper over httpx with base-URL handling, query building,
body encoding and three response formats:

- ``body`` (default): parsed JSON or text
- ``full``: FullResponse with status, ok flag, headers, elapsed time and body
- ``raw``: the httpx.Response itself

Non-2xx responses never raise; use ``format="full"`` and check ``ok``.
"""

import time
from typing import Any, Dict, Mapping, Optional

import httpx

from fetchkit.config import Config
from fetchkit.core.http.options import build_fetch_opts
from fetchkit.core.http.response import FullResponse
from fetchkit.core.logging import logger

FORMATS = ("body", "full", "raw")


def debug_handler(resp: Any) -> None:
    """Log every field of a full response. Pass as ``handler`` while debugging."""
    if isinstance(resp, FullResponse):
        logger.info("http_response_debug", **resp.to_dict())
    else:
        logger.info("http_response_debug", body=resp)


class HTTP:
    """Async HTTP client.

    Override ``FETCH_DEFAULTS`` in a subclass to change transport defaults
    (see ``fetchkit.core.http.options``).
    """

    FETCH_DEFAULTS: Dict[str, Any] = {"follow_redirects": True}
    debug_handler = staticmethod(debug_handler)

    def __init__(self, **opts: Any):
        """Initialize HTTP client.

        Args:
            url: Explicit base URL (overrides protocol/host/port)
            protocol: "http" or "https" (default: http)
            host: Host name (default: localhost)
            port: Port number (default: none)
            headers: Headers sent with every request
            timeout: Timeout in seconds (default: FETCHKIT_TIMEOUT or none)
            json: Parse JSON responses / encode JSON bodies (default: True)
            format: "body", "full" or "raw" (default: body)
            urlencoded: Form-encode post bodies (default: False)
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.opts = self.parse_opts(opts)
        self.base = self.build_base(self.opts.get("url"))
        self.headers = self.opts["headers"]
        self.transport = opts.get("transport")

    def parse_opts(self, opts: Mapping[str, Any]) -> Dict[str, Any]:
        out: Dict[str, Any] = {}

        proto = str(opts.get("protocol") or "http").rstrip(":").lower()
        out["protocol"] = proto if proto in ("http", "https") else "http"

        out["host"] = opts.get("host") or "localhost"

        port = opts.get("port")
        try:
            port = int(port) if port is not None else None
        except (TypeError, ValueError):
            port = None
        out["port"] = port if port and port > 0 else None

        url = opts.get("url") or Config.base_url()
        if isinstance(url, str) and url.strip():
            out["url"] = "".join(url.split())

        headers = opts.get("headers")
        out["headers"] = dict(headers) if isinstance(headers, Mapping) else {}

        out["timeout"] = opts["timeout"] if "timeout" in opts else Config.timeout()
        out["json"] = opts.get("json", True)
        out["format"] = opts.get("format") or "body"
        out["urlencoded"] = opts.get("urlencoded", False)

        if out["format"] not in FORMATS:
            raise ValueError(f"Unsupported response format {out['format']!r}")

        out.update(build_fetch_opts(self.FETCH_DEFAULTS, opts))
        return out

    def build_base(self, url: Optional[str]) -> str:
        if url:
            return url

        port_part = f":{self.opts['port']}" if self.opts["port"] else ""
        return f"{self.opts['protocol']}://{self.opts['host']}{port_part}/"

    def build_path(self, path: str) -> str:
        # Absolute URLs (e.g. resolved from a spec) bypass the base
        if path.startswith(("http://", "https://")):
            return path

        clean_base = self.base if self.base.endswith("/") else self.base + "/"
        clean_path = path[1:] if path.startswith("/") else path
        return clean_base + clean_path

    def build_get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = self.build_path(path)
        query = self.to_query_params(params)

        if not query:
            return url
        if url.endswith("?"):
            return url + query
        if "?" in url:
            return f"{url}&{query}"
        return f"{url}?{query}"

    async def get(self, path: str, opts: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request.

        Args:
            path: Endpoint path (relative to base) or absolute URL
            opts: params, headers, timeout, json, format, handler, and any
                transport option from FETCH_CONSTANTS

        Returns:
            Parsed response in the requested format

        Example:
            >>> data = await http.get("/api/search", {"params": {"q": "dog"}})
        """
        opts = dict(opts or {})
        url = self.build_get(path, opts.get("params"))
        headers = {**self.headers, **(opts.get("headers") or {})}

        response, elapsed = await self._send("GET", url, opts, headers=headers)
        data = self.parse_response(response, opts, elapsed)
        return self.process_response(data, opts)

    async def post(self, path: str, data: Any = None, opts: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a POST request.

        Body encoding: ``str``/``bytes`` are sent as-is; otherwise
        ``urlencoded`` form-encodes and ``json`` (default) JSON-encodes.
        """
        opts = dict(opts or {})
        urlencoded = opts.get("urlencoded", self.opts["urlencoded"])
        as_json = opts.get("json", self.opts["json"])

        url = self.build_path(path)
        headers = {**self.headers, **(opts.get("headers") or {})}
        body: Dict[str, Any] = {}

        if isinstance(data, (str, bytes, bytearray)):
            body["content"] = data
        elif urlencoded:
            body["data"] = dict(data or {})
        elif as_json:
            body["json"] = data
        elif data is not None:
            body["content"] = data

        response, elapsed = await self._send("POST", url, opts, headers=headers, **body)
        parsed = self.parse_response(response, opts, elapsed)
        return self.process_response(parsed, opts)

    async def _send(self, method: str, url: str, opts: Mapping[str, Any], **kwargs: Any):
        timeout = opts["timeout"] if "timeout" in opts else self.opts["timeout"]
        fetch_opts = build_fetch_opts(self.opts, opts)

        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            start = time.perf_counter()
            response = await client.request(method, url, **kwargs, **fetch_opts)
            elapsed = (time.perf_counter() - start) * 1000

        logger.debug(
            "http_request_completed",
            method=method,
            url=url,
            status_code=response.status_code,
            elapsed_ms=round(elapsed, 2),
        )
        return response, elapsed

    def parse_response(
        self, response: httpx.Response, opts: Mapping[str, Any], elapsed: Optional[float] = None
    ) -> Any:
        fmt = opts.get("format") or self.opts["format"]
        if fmt == "raw":
            return response

        is_json = opts.get("json", self.opts["json"])
        content_type = response.headers.get("content-type", "")

        if is_json and "application/json" in content_type:
            body = response.json()
        else:
            body = response.text

        if fmt == "full":
            return FullResponse(
                status=response.status_code,
                status_text=response.reason_phrase,
                ok=response.is_success,
                url=str(response.url),
                redirected=bool(response.history),
                elapsed_ms=elapsed,
                headers=dict(response.headers),
                body=body,
            )

        return body

    def process_response(self, data: Any, opts: Mapping[str, Any]) -> Any:
        handler = opts.get("handler")
        if callable(handler):
            handler(data)
        return data

    @staticmethod
    def to_query_params(params: Optional[Mapping[str, Any]]) -> str:
        if not params or not isinstance(params, Mapping):
            return ""
        return str(httpx.QueryParams(params))
