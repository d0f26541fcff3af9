"""Unit tests for BatchLoader."""

import asyncio

import httpx
import pytest

from conftest import FakeHTTP
from fetchkit.core.batch import BatchLoader, HandlerMode, TaskCoordinator, WorkItem
from fetchkit.core.batch.models import TaskError, TaskResult
from fetchkit.core.errors import BatchValidationError, ConfigurationError, ErrorCategory


def items(*ids):
    return [{"id": task_id, "url": f"/{task_id}"} for task_id in ids]


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, snapshot, *args):
        self.calls.append((snapshot, args))


class TestBlockingRun:
    """Test run() with await_all=True."""

    @pytest.mark.asyncio
    async def test_all_ok_fires_load_once(self, fake_http):
        """Test an all-ok batch fires on_load once with every result."""
        loader = BatchLoader(fake_http)
        on_load, on_fail = Recorder(), Recorder()

        outcome = await loader.run(items("cfg", "lang", "ping"), on_load, on_fail, limit=8)

        assert len(on_load.calls) == 1
        assert on_fail.calls == []
        assert set(outcome.results) == {"cfg", "lang", "ping"}
        assert outcome.coordinator.has_failed() is False
        assert outcome.coordinator.is_complete() is True

    @pytest.mark.asyncio
    async def test_not_ok_response_fires_fail(self):
        """Test a not-ok response fails its item under the default strategy."""
        failing = {"ok": False, "status": 500}
        http = FakeHTTP(responses={"/lang": failing})
        loader = BatchLoader(http)
        on_load, on_fail = Recorder(), Recorder()

        outcome = await loader.run(items("cfg", "lang", "ping"), on_load, on_fail)

        assert on_load.calls == []
        assert len(on_fail.calls) == 1
        snapshot, _ = on_fail.calls[0]
        assert snapshot.state.failed == {"lang"}
        assert outcome.results["lang"] is failing
        assert loader.get("lang") is failing

    @pytest.mark.asyncio
    async def test_callback_receives_triggering_result(self, fake_http):
        """Test the forwarded argument is the triggering item's raw result."""
        loader = BatchLoader(fake_http)
        on_load = Recorder()

        await loader.run(items("only"), on_load)

        snapshot, args = on_load.calls[0]
        assert snapshot.trigger == "only"
        assert snapshot.context is loader.context
        assert args == ({"ok": True, "url": "/only"},)

    @pytest.mark.asyncio
    async def test_results_are_raw_outcomes(self):
        """Test results hold the executor's value, not the handler's return."""
        http = FakeHTTP(responses={"/a": {"ok": True, "body": {"x": 1}}})
        loader = BatchLoader(http)

        outcome = await loader.run(
            [{"id": "a", "url": "/a", "handler": lambda res: res["body"]["x"]}]
        )

        assert outcome.results["a"] == {"ok": True, "body": {"x": 1}}

    @pytest.mark.asyncio
    async def test_handler_false_fails_item(self, fake_http):
        """Test a user handler returning False fails the item."""
        loader = BatchLoader(fake_http)
        on_fail = Recorder()

        outcome = await loader.run(
            [
                {"id": "a", "url": "/a", "handler": lambda res: False},
                {"id": "b", "url": "/b"},
            ],
            on_fail=on_fail,
        )

        assert outcome.coordinator.has_failed("a") is True
        assert outcome.coordinator.has_failed("b") is False
        assert len(on_fail.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_batch(self, fake_http):
        """Test an empty item list resolves immediately."""
        loader = BatchLoader(fake_http)
        on_load = Recorder()

        outcome = await loader.run([], on_load)

        assert outcome.results == {}
        assert on_load.calls == []
        assert fake_http.calls == []

    @pytest.mark.asyncio
    async def test_accepts_work_items(self, fake_http):
        """Test WorkItem instances are accepted as-is."""
        loader = BatchLoader(fake_http)

        outcome = await loader.run([WorkItem(id="w", url="/w")])

        assert isinstance(outcome.coordinator, TaskCoordinator)
        assert "w" in outcome.results


class TestRequestDispatch:
    """Test how items are turned into executor calls."""

    @pytest.mark.asyncio
    async def test_post_items_send_data(self, fake_http):
        """Test post items call http.post with their data."""
        loader = BatchLoader(fake_http)

        await loader.run([{"id": "p", "url": "/p", "method": "POST", "data": {"q": 1}}])

        method, url, data, _ = fake_http.calls[0]
        assert (method, url, data) == ("post", "/p", {"q": 1})

    @pytest.mark.asyncio
    async def test_options_merge_order(self, fake_http):
        """Test per-item options override batch defaults, which override format=full."""
        loader = BatchLoader(fake_http, fetch_opts={"timeout": 5, "json": False})

        await loader.run([{"id": "a", "url": "/a", "opts": {"json": True, "headers": {"X": "1"}}}])

        _, _, _, opts = fake_http.calls[0]
        assert opts == {"format": "full", "timeout": 5, "json": True, "headers": {"X": "1"}}

    @pytest.mark.asyncio
    async def test_set_fetch_opts(self, fake_http):
        """Test defaults can be replaced after construction."""
        loader = BatchLoader(fake_http)
        loader.set_fetch_opts({"format": "body"})

        await loader.run(items("a"), limit=1)

        assert fake_http.calls[0][3]["format"] == "body"


class TestPreflight:
    """Test validation before anything runs."""

    @pytest.mark.asyncio
    async def test_duplicate_ids_raise_before_any_call(self, fake_http):
        """Test duplicate ids raise with zero executor calls."""
        loader = BatchLoader(fake_http)

        with pytest.raises(BatchValidationError, match="Duplicate"):
            await loader.run([{"id": "x", "url": "/a"}, {"id": "x", "url": "/b"}])

        assert fake_http.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "bad_item",
        [
            {"url": "/missing-id"},
            {"id": "", "url": "/empty-id"},
            {"id": "no-url"},
            {"id": "blank-url", "url": "   "},
            {"id": "bad-method", "url": "/a", "method": "delete"},
        ],
    )
    async def test_invalid_items_raise(self, fake_http, bad_item):
        """Test missing id/url and unsupported methods are rejected."""
        loader = BatchLoader(fake_http)

        with pytest.raises(BatchValidationError):
            await loader.run([{"id": "ok", "url": "/ok"}, bad_item])

        assert fake_http.calls == []

    @pytest.mark.asyncio
    async def test_non_dict_item_raises(self, fake_http):
        """Test items must be dicts or WorkItem."""
        loader = BatchLoader(fake_http)

        with pytest.raises(BatchValidationError, match="must be a dict"):
            await loader.run(["/just-a-url"])

    @pytest.mark.asyncio
    async def test_validation_error_is_value_error(self, fake_http):
        """Test BatchValidationError can be caught as ValueError."""
        loader = BatchLoader(fake_http)

        with pytest.raises(ValueError):
            await loader.run([{"id": "x"}])

    @pytest.mark.asyncio
    async def test_invalid_limit_raises(self, fake_http):
        """Test a non-positive limit is a configuration error."""
        loader = BatchLoader(fake_http)

        with pytest.raises(ConfigurationError):
            await loader.run(items("a"), limit=0)

        assert fake_http.calls == []


class TestConcurrency:
    """Test the concurrency bound."""

    @pytest.mark.asyncio
    async def test_limit_one_is_sequential_in_submission_order(self):
        """Test limit=1 runs requests one at a time in submission order."""
        http = FakeHTTP(delays={"/slow": 0.03, "/mid": 0.02, "/fast": 0.01})
        loader = BatchLoader(http)

        await loader.run(items("slow", "mid", "fast"), limit=1)

        assert http.max_in_flight == 1
        assert http.events == [
            ("start", "/slow"), ("end", "/slow"),
            ("start", "/mid"), ("end", "/mid"),
            ("start", "/fast"), ("end", "/fast"),
        ]

    @pytest.mark.asyncio
    async def test_limit_bounds_in_flight(self):
        """Test in-flight requests never exceed the limit."""
        http = FakeHTTP(delays={f"/{i}": 0.01 for i in range(10)})
        loader = BatchLoader(http)

        await loader.run(items(*[str(i) for i in range(10)]), limit=3)

        assert http.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_default_limit_from_config(self, monkeypatch):
        """Test FETCHKIT_BATCH_LIMIT sets the default limit."""
        monkeypatch.setenv("FETCHKIT_BATCH_LIMIT", "1")
        http = FakeHTTP(delays={"/a": 0.01, "/b": 0.01})
        loader = BatchLoader(http)

        await loader.run(items("a", "b"))

        assert http.max_in_flight == 1


class TestStreamingRun:
    """Test run() with await_all=False."""

    @pytest.mark.asyncio
    async def test_returns_live_handles(self):
        """Test run returns pending handles and an incomplete coordinator."""
        http = FakeHTTP(delays={"/a": 0.01, "/b": 0.01, "/c": 0.01})
        loader = BatchLoader(http)
        on_load = Recorder()

        outcome = await loader.run(items("a", "b", "c"), on_load, await_all=False)

        assert isinstance(outcome.results, list)
        assert len(outcome.results) == 3
        assert outcome.coordinator.is_complete() is False

        done = await asyncio.gather(*outcome.results)

        assert outcome.coordinator.is_complete() is True
        assert [task.id for task in done] == ["a", "b", "c"]
        assert all(isinstance(task, TaskResult) for task in done)
        assert len(on_load.calls) == 1

    @pytest.mark.asyncio
    async def test_poll_with_wait(self):
        """Test the coordinator can be awaited instead of polled."""
        http = FakeHTTP(responses={"/b": {"ok": False}})
        loader = BatchLoader(http)

        outcome = await loader.run(items("a", "b"), await_all=False)
        snapshot = await asyncio.wait_for(outcome.coordinator.wait(), timeout=1)

        assert snapshot.state.failed == {"b"}
        assert outcome.failed_ids == {"b"}


class TestExecutionErrors:
    """Test exceptions raised while executing items."""

    @pytest.mark.asyncio
    async def test_executor_exception_becomes_failure(self):
        """Test a raising executor fails the item and the batch still resolves."""
        http = FakeHTTP(errors={"/b": httpx.ConnectError("connection refused")})
        loader = BatchLoader(http)
        on_load, on_fail = Recorder(), Recorder()

        outcome = await loader.run(items("a", "b", "c"), on_load, on_fail)

        assert on_load.calls == []
        assert len(on_fail.calls) == 1
        error = outcome.results["b"]
        assert isinstance(error, TaskError)
        assert error.error_type == "ConnectError"
        assert error.category == ErrorCategory.TRANSIENT
        assert outcome.coordinator.has_failed("b") is True
        assert outcome.coordinator.is_complete() is True

    @pytest.mark.asyncio
    async def test_executor_exception_skips_storage(self):
        """Test nothing is stored for an item whose request raised."""
        http = FakeHTTP(errors={"/a": RuntimeError("boom")})
        loader = BatchLoader(http)

        await loader.run(items("a"))

        assert loader.get("a") is None

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_failure(self, fake_http):
        """Test a raising handler fails the item."""
        loader = BatchLoader(fake_http)

        outcome = await loader.run([{"id": "a", "url": "/a", "handler": lambda res: 1 / 0}])

        assert isinstance(outcome.results["a"], TaskError)
        assert outcome.results["a"].error_type == "ZeroDivisionError"
        assert outcome.coordinator.has_failed("a") is True

    @pytest.mark.asyncio
    async def test_callback_exception_propagates(self, fake_http):
        """Test an exception from the terminal callback is not swallowed."""
        loader = BatchLoader(fake_http)

        def on_load(snapshot, *args):
            raise RuntimeError("callback broke")

        with pytest.raises(RuntimeError, match="callback broke"):
            await loader.run(items("a"), on_load)


class TestStrategiesInLoader:
    """Test strategy selection on the loader."""

    @pytest.mark.asyncio
    async def test_store_always_ignores_status(self):
        """Test store-always stores and does not fail not-ok responses."""
        http = FakeHTTP(responses={"/a": {"ok": False}})
        loader = BatchLoader(http, strategy=HandlerMode.STORE)

        outcome = await loader.run(items("a"))

        assert outcome.coordinator.has_failed() is False
        assert loader.get("a") == {"ok": False}

    @pytest.mark.asyncio
    async def test_store_none_leaves_context_empty(self, fake_http):
        """Test store-none stores nothing unless the handler does."""
        loader = BatchLoader(fake_http, strategy=False)

        def keep(res):
            loader.context["b"] = "kept"

        await loader.run([{"id": "a", "url": "/a"}, {"id": "b", "url": "/b", "handler": keep}])

        assert loader.get("a") is None
        assert loader.get("b") == "kept"

    @pytest.mark.asyncio
    async def test_context_survives_runs(self, fake_http):
        """Test results of earlier runs remain retrievable."""
        loader = BatchLoader(fake_http)

        await loader.run(items("first"))
        await loader.run(items("second"))

        assert loader.get("first") == {"ok": True, "url": "/first"}
        assert loader.get("second") == {"ok": True, "url": "/second"}

    def test_set_strategy(self, fake_http):
        """Test strategies can be swapped by name."""
        loader = BatchLoader(fake_http)
        loader.set_strategy("none")

        assert type(loader.strategy).__name__ == "StoreNoneStrategy"
