"""Shared fixtures for fetchkit tests."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest


class FakeHTTP:
    """Executor stand-in with per-URL responses, delays and errors.

    Records every call and the start/end order of requests so tests can
    check admission order and concurrency.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        delays: Optional[Dict[str, float]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ):
        self.responses = responses or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: List[Tuple[str, str, Any, Dict[str, Any]]] = []
        self.events: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, url: str, opts: Optional[Dict[str, Any]] = None) -> Any:
        return await self._handle("get", url, None, opts or {})

    async def post(self, url: str, data: Any = None, opts: Optional[Dict[str, Any]] = None) -> Any:
        return await self._handle("post", url, data, opts or {})

    async def _handle(self, method: str, url: str, data: Any, opts: Dict[str, Any]) -> Any:
        self.calls.append((method, url, data, opts))
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            if url in self.errors:
                raise self.errors[url]
            return self.responses.get(url, {"ok": True, "url": url})
        finally:
            self.in_flight -= 1
            self.events.append(("end", url))


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep FETCHKIT_* variables from the outer environment out of tests."""
    for name in (
        "FETCHKIT_BASE_URL",
        "FETCHKIT_TIMEOUT",
        "FETCHKIT_BATCH_LIMIT",
        "FETCHKIT_LOG_LEVEL",
        "FETCHKIT_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
