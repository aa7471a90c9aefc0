"""
Tests for the CrispHooks container.

Tests cover:
- Ordering (registration order, priorities, mixed sync/async handlers)
- Failure propagation and reverse-order error handlers
- trigger_error / trigger_sync / trigger_error_sync
- trigger_wrap success and unwind ordering
- Receivers, bound hooks and the mixin form
- Callback-style hooks and the register decorator
"""

import asyncio

import pytest

from crisphooks import CrispHooks, HookError, HooksConfig, HookUnwindError, InvalidHookError


class Boom(Exception):
    """Error with a readable str() for order assertions."""


async def delay_result(result):
    await asyncio.sleep(0.003)
    return result


async def delay_error(error):
    await asyncio.sleep(0.003)
    raise error


# =============================================================================
# Ordering
# =============================================================================


class TestTriggerOrdering:
    """Handlers run one after another in (priority, registration) order."""

    @pytest.mark.asyncio
    async def test_executes_hooks_as_registered(self, hooks):
        """Equal priorities run in registration order."""
        hooks.hook("foo", lambda arg: delay_result(f"A{arg}"))
        hooks.hook("foo", lambda arg: delay_result(f"B{arg}"))
        hooks.hook("foo", lambda arg: delay_result(f"C{arg}"))

        assert await hooks.trigger("foo", 1) == ["A1", "B1", "C1"]

    @pytest.mark.asyncio
    async def test_executes_hooks_in_priority_order(self, hooks):
        """Lower priorities run first."""
        hooks.hook("foo", lambda arg: delay_result(f"A{arg}"), None, 2)
        hooks.hook("foo", lambda arg: delay_result(f"B{arg}"), None, 3)
        hooks.hook("foo", lambda arg: delay_result(f"C{arg}"), None, 1)

        assert await hooks.trigger("foo", 1) == ["C1", "A1", "B1"]

    @pytest.mark.asyncio
    async def test_priority_ties_keep_registration_order(self, hooks):
        """Ties on priority fall back to registration order, across float priorities."""
        hooks.hook("foo", lambda: "late", priority=5)
        hooks.hook("foo", lambda: "first-zero", priority=0)
        hooks.hook("foo", lambda: "negative", priority=-1.5)
        hooks.hook("foo", lambda: "second-zero", priority=0)

        assert await hooks.trigger("foo") == ["negative", "first-zero", "second-zero", "late"]

    @pytest.mark.asyncio
    async def test_mixed_sync_and_async_hooks(self, hooks):
        """Plain values and awaitables can be mixed freely."""
        hooks.hook("foo", lambda arg: f"A{arg}")
        hooks.hook("foo", lambda arg: delay_result(f"B{arg}"))
        hooks.hook("foo", lambda arg: f"C{arg}")

        assert await hooks.trigger("foo", 1) == ["A1", "B1", "C1"]

    @pytest.mark.asyncio
    async def test_async_def_handlers(self, hooks):
        """Coroutine functions are awaited like any other awaitable."""

        async def handler(arg):
            await asyncio.sleep(0)
            return arg * 2

        hooks.hook("foo", handler)
        hooks.hook("foo", lambda arg: arg + 1)

        assert await hooks.trigger("foo", 5) == [10, 6]

    @pytest.mark.asyncio
    async def test_one_at_a_time(self, hooks):
        """The next handler does not start before the previous one settles."""
        events = []

        async def slow():
            events.append("slow-start")
            await asyncio.sleep(0.01)
            events.append("slow-end")

        hooks.hook("foo", slow)
        hooks.hook("foo", lambda: events.append("fast"))

        await hooks.trigger("foo")

        assert events == ["slow-start", "slow-end", "fast"]

    @pytest.mark.asyncio
    async def test_no_hooks_registered(self, hooks):
        """Unknown names trigger to an empty result."""
        assert await hooks.trigger("foo", 1) == []

    @pytest.mark.asyncio
    async def test_single_hook_registered(self, hooks):
        hooks.hook("foo", lambda arg: delay_result(f"A{arg}"))

        assert await hooks.trigger("foo", 1) == ["A1"]

    @pytest.mark.asyncio
    async def test_none_results_are_recorded(self, hooks):
        """Handlers that return nothing still occupy a result slot."""
        hooks.hook("foo", lambda: None)
        hooks.hook("foo", lambda: delay_result(None))

        assert await hooks.trigger("foo") == [None, None]


# =============================================================================
# Failures and error handlers
# =============================================================================


class TestTriggerFailures:
    """Failure at entry i unwinds entries i-1..0 and re-raises the original error."""

    @pytest.mark.asyncio
    async def test_asynchronous_error(self, hooks):
        error = Boom("123")
        hooks.hook("foo", lambda arg: f"A{arg}")
        hooks.hook("foo", lambda arg: delay_error(error))
        hooks.hook("foo", lambda arg: pytest.fail("should not reach"))

        with pytest.raises(Boom) as exc_info:
            await hooks.trigger("foo", 1)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_synchronous_error(self, hooks):
        error = Boom("123")

        def fail(arg):
            raise error

        hooks.hook("foo", lambda arg: f"A{arg}")
        hooks.hook("foo", fail)
        hooks.hook("foo", lambda arg: pytest.fail("should not reach"))

        with pytest.raises(Boom) as exc_info:
            await hooks.trigger("foo", 1)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_error_handlers_run_in_reverse_order(self, hooks):
        """The failing entry's own error handler never runs."""
        error = Boom("123")
        results = []

        def handler(label, outcome):
            def run(arg):
                results.append(label)
                return outcome(arg)

            return run

        def error_handler(label, returns=None):
            def run(err, arg):
                results.append(label)
                assert err is error
                assert arg == 1
                return returns

            return run

        hooks.hook("foo", handler("A", lambda arg: delay_result(f"A{arg}")), error_handler("eA"), 1)
        hooks.hook(
            "foo",
            handler("B", lambda arg: delay_result(f"B{arg}")),
            error_handler("eB", returns=delay_result(None)),
            2,
        )
        hooks.hook("foo", handler("C", lambda arg: delay_error(error)), error_handler("eC"), 3)

        with pytest.raises(Boom) as exc_info:
            await hooks.trigger("foo", 1)

        assert exc_info.value is error
        assert results == ["A", "B", "C", "eB", "eA"]

    @pytest.mark.asyncio
    async def test_entries_without_error_handler_are_skipped(self, hooks):
        results = []
        hooks.hook("foo", lambda: None, lambda err: results.append("eA"))
        hooks.hook("foo", lambda: None)
        hooks.hook("foo", lambda: None, lambda err: results.append("eC"))
        hooks.hook("foo", lambda: delay_error(Boom("x")))

        with pytest.raises(Boom):
            await hooks.trigger("foo")

        assert results == ["eC", "eA"]

    @pytest.mark.asyncio
    async def test_first_entry_failure_runs_no_error_handlers(self, hooks):
        results = []

        def fail():
            raise Boom("first")

        hooks.hook("foo", fail, lambda err: results.append("own"))
        hooks.hook("foo", lambda: None, lambda err: results.append("later"))

        with pytest.raises(Boom):
            await hooks.trigger("foo")

        assert results == []

    @pytest.mark.asyncio
    async def test_failing_error_handler_raises_unwind_error(self, hooks):
        """A cleanup failure stops the unwind and is reported distinctly."""
        results = []
        original = Boom("original")
        cleanup = RuntimeError("cleanup broke")

        def broken_cleanup(err):
            results.append("eB")
            raise cleanup

        hooks.hook("foo", lambda: None, lambda err: results.append("eA"))
        hooks.hook("foo", lambda: None, broken_cleanup)
        hooks.hook("foo", lambda: delay_error(original))

        with pytest.raises(HookUnwindError) as exc_info:
            await hooks.trigger("foo")

        unwind_error = exc_info.value
        assert unwind_error.__cause__ is cleanup
        assert unwind_error.cleanup_error is cleanup
        assert unwind_error.original_error is original
        assert unwind_error.hook_name == "foo"
        assert unwind_error.index == 1
        assert results == ["eB"]

    @pytest.mark.asyncio
    async def test_async_failing_error_handler_raises_unwind_error(self, hooks):
        hooks.hook("foo", lambda: None, lambda err: delay_error(RuntimeError("late cleanup")))
        hooks.hook("foo", lambda: delay_error(Boom("x")))

        with pytest.raises(HookUnwindError) as exc_info:
            await hooks.trigger("foo")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


# =============================================================================
# trigger_error
# =============================================================================


class TestTriggerError:
    """trigger_error runs every error handler, last entry first."""

    @pytest.mark.asyncio
    async def test_triggers_all_error_handlers(self, hooks):
        error = Boom("123")
        results = []

        def error_handler(label, returns=None):
            def run(err):
                assert err is error
                results.append(label)
                return returns

            return run

        hooks.hook("foo", lambda arg: None, error_handler("A"))
        hooks.hook("foo", lambda arg: None, error_handler("B", returns=delay_result(None)))
        hooks.hook("foo", lambda arg: None, error_handler("C"))

        assert await hooks.trigger_error("foo", error) is None
        assert results == ["C", "B", "A"]

    @pytest.mark.asyncio
    async def test_forwards_extra_arguments(self, hooks):
        seen = []
        hooks.hook("foo", lambda *args: None, lambda err, a, b: seen.append((a, b)))

        await hooks.trigger_error("foo", Boom("x"), 1, 2)

        assert seen == [(1, 2)]

    @pytest.mark.asyncio
    async def test_default_error(self, hooks):
        """Without an error, handlers receive a HookError naming the hook."""
        seen = []
        hooks.hook("foo", lambda: None, seen.append)

        await hooks.trigger_error("foo")

        assert isinstance(seen[0], HookError)
        assert "foo" in str(seen[0])

    @pytest.mark.asyncio
    async def test_unknown_name_is_a_no_op(self, hooks):
        assert await hooks.trigger_error("missing", Boom("x")) is None

    @pytest.mark.asyncio
    async def test_failing_error_handler(self, hooks):
        def broken(err):
            raise RuntimeError("nope")

        hooks.hook("foo", lambda: None, broken)

        with pytest.raises(HookUnwindError):
            await hooks.trigger_error("foo", Boom("x"))


# =============================================================================
# Synchronous triggers
# =============================================================================


class TestSyncTriggers:
    """trigger_sync and trigger_error_sync run on the caller's stack."""

    def test_trigger_sync(self, hooks):
        hooks.hook("foo", lambda arg: f"A{arg}")
        hooks.hook("foo", lambda arg: f"B{arg}")
        hooks.hook("foo", lambda arg: f"C{arg}")

        assert hooks.trigger_sync("foo", 1) == ["A1", "B1", "C1"]

    def test_trigger_sync_raises_original_error(self, hooks):
        error = Boom("123")
        results = []

        def fail(arg):
            raise error

        hooks.hook("foo", lambda arg: f"A{arg}", lambda err, arg: results.append(("eA", err, arg)))
        hooks.hook("foo", fail)
        hooks.hook("foo", lambda arg: pytest.fail("should not reach"))

        with pytest.raises(Boom) as exc_info:
            hooks.trigger_sync("foo", 1)

        assert exc_info.value is error
        assert results == [("eA", error, 1)]

    def test_trigger_error_sync(self, hooks):
        error = Boom("123")
        results = []
        for label in ("A", "B", "C"):
            hooks.hook(
                "foo",
                lambda arg: None,
                lambda err, label=label: results.append(label) if err is error else None,
            )

        hooks.trigger_error_sync("foo", error)

        assert results == ["C", "B", "A"]

    def test_trigger_sync_without_hooks(self, hooks):
        assert hooks.trigger_sync("foo") == []


# =============================================================================
# Wrap
# =============================================================================


class TestTriggerWrap:
    """trigger_wrap runs pre-<name>, <name>, the body and post-<name>."""

    @pytest.mark.asyncio
    async def test_executes_the_relevant_hooks(self, hooks):
        results = []

        def record(label):
            def run(arg):
                results.append(f"{label}{arg}")
                return delay_result(None)

            return run

        hooks.hook("pre-foo", record("A"))
        hooks.hook("pre-foo", record("B"))
        hooks.hook("foo", record("C"))
        hooks.hook("foo", record("D"))
        hooks.hook("post-foo", record("F"))
        hooks.hook("post-foo", record("G"))

        def body(arg):
            results.append("E")
            return delay_result("body-result")

        result = await hooks.trigger_wrap("foo", body, 1)

        assert results == ["A1", "B1", "C1", "D1", "E", "F1", "G1"]
        assert result == "body-result"

    @pytest.mark.asyncio
    async def test_executes_error_handlers(self, hooks):
        """A post failure unwinds post, then the main stage, then pre."""
        results = []

        def cleanup(label):
            def run(err, arg):
                results.append(f"{label}{err}")
                return delay_result(None)

            return run

        hooks.hook("pre-foo", lambda arg: None, cleanup("A"))
        hooks.hook("pre-foo", lambda arg: None, cleanup("B"))
        hooks.hook("foo", lambda arg: None, cleanup("C"))
        hooks.hook("foo", lambda arg: None, cleanup("D"))
        hooks.hook("post-foo", lambda arg: None, cleanup("F"))
        hooks.hook("post-foo", lambda arg: delay_error(Boom("123")), cleanup("G"))

        def body(arg):
            results.append("E")
            return delay_result(None)

        with pytest.raises(Boom) as exc_info:
            await hooks.trigger_wrap("foo", body, 1)

        assert str(exc_info.value) == "123"
        assert results == ["E", "F123", "D123", "C123", "B123", "A123"]

    @pytest.mark.asyncio
    async def test_body_failure_unwinds_main_then_pre(self, hooks):
        results = []
        hooks.hook("pre-foo", lambda: None, lambda err: results.append("pre"))
        hooks.hook("foo", lambda: None, lambda err: results.append("main"))
        hooks.hook("post-foo", lambda: results.append("post"), lambda err: results.append("ePost"))

        def body():
            raise Boom("body")

        with pytest.raises(Boom):
            await hooks.trigger_wrap("foo", body)

        assert results == ["main", "pre"]

    @pytest.mark.asyncio
    async def test_main_failure_unwinds_pre_only(self, hooks):
        results = []
        hooks.hook("pre-foo", lambda: None, lambda err: results.append("pre"))
        hooks.hook("foo", lambda: None, lambda err: results.append("main-0"))
        hooks.hook("foo", lambda: delay_error(Boom("main")), lambda err: results.append("main-1"))

        with pytest.raises(Boom):
            await hooks.trigger_wrap("foo", lambda: results.append("body"))

        assert results == ["main-0", "pre"]

    @pytest.mark.asyncio
    async def test_pre_failure_runs_nothing_else(self, hooks):
        results = []
        hooks.hook("pre-foo", lambda: delay_error(Boom("pre")))
        hooks.hook("foo", lambda: results.append("main"), lambda err: results.append("eMain"))

        with pytest.raises(Boom):
            await hooks.trigger_wrap("foo", lambda: results.append("body"))

        assert results == []

    @pytest.mark.asyncio
    async def test_without_body_returns_post_results(self, hooks):
        hooks.hook("post-foo", lambda arg: f"P{arg}")

        assert await hooks.trigger_wrap("foo", None, 7) == ["P7"]

    @pytest.mark.asyncio
    async def test_without_any_hooks(self, hooks):
        assert await hooks.trigger_wrap("foo", lambda: 42) == 42

    @pytest.mark.asyncio
    async def test_cleanup_failure_stops_stage_unwind(self, hooks):
        """When a stage's own cleanup fails, earlier stages are left alone."""
        calls = []
        cleanup_error = RuntimeError("cleanup broke")

        def broken_cleanup(err):
            raise cleanup_error

        def fail():
            raise Boom("main")

        hooks.hook("pre-foo", lambda: None, lambda err: calls.append(("pre", type(err).__name__)))
        hooks.hook("foo", lambda: None, broken_cleanup)
        hooks.hook("foo", fail)

        with pytest.raises(HookUnwindError) as exc_info:
            await hooks.trigger_wrap("foo", lambda: calls.append("body"))

        assert exc_info.value.cleanup_error is cleanup_error
        assert isinstance(exc_info.value.original_error, Boom)
        assert calls == []

    @pytest.mark.asyncio
    async def test_post_cleanup_failure_skips_earlier_stages(self, hooks):
        calls = []

        def broken_cleanup(err):
            raise RuntimeError("post cleanup")

        hooks.hook("foo", lambda: None, lambda err: calls.append("main"))
        hooks.hook("post-foo", lambda: None, broken_cleanup)
        hooks.hook("post-foo", lambda: delay_error(Boom("post")))

        with pytest.raises(HookUnwindError):
            await hooks.trigger_wrap("foo", None)

        assert calls == []


# =============================================================================
# Receivers and binding
# =============================================================================


class Document(CrispHooks):
    def __init__(self):
        super().__init__(config=HooksConfig(logging=False, metrics=False))
        self.touched = 0
        self.hook("save", Document.touch, bind=True)

    def touch(self, *args):
        self.touched += 1
        return self.touched


class TestReceivers:
    """Bound hooks receive the trigger receiver as first argument."""

    @pytest.mark.asyncio
    async def test_default_receiver_is_the_container(self, hooks):
        hooks.hook("foo", lambda receiver, arg: (receiver, arg), bind=True)

        assert await hooks.trigger("foo", 1) == [(hooks, 1)]

    @pytest.mark.asyncio
    async def test_explicit_receiver(self, hooks):
        target = object()
        hooks.hook("foo", lambda receiver: receiver, bind=True)
        hooks.hook("foo", lambda: "unbound")

        assert await hooks.trigger("foo", receiver=target) == [target, "unbound"]

    def test_receiver_in_sync_trigger(self, hooks):
        target = object()
        hooks.hook("foo", lambda receiver, arg: receiver is target and arg, bind=True)

        assert hooks.trigger_sync("foo", "ok", receiver=target) == ["ok"]

    @pytest.mark.asyncio
    async def test_bound_error_handler(self, hooks):
        target = object()
        seen = []
        hooks.hook(
            "foo",
            lambda receiver: None,
            lambda receiver, err: seen.append((receiver, err)),
            bind=True,
        )
        error = Boom("x")

        await hooks.trigger_error("foo", error, receiver=target)

        assert seen == [(target, error)]

    @pytest.mark.asyncio
    async def test_mixin_host_is_receiver(self):
        doc = Document()

        assert await doc.trigger("save") == [1]
        assert doc.trigger_sync("save") == [2]
        assert doc.touched == 2


# =============================================================================
# Registration forms
# =============================================================================


class TestRegistration:
    """hook(), hook_callback() and the register decorator."""

    def test_hook_returns_self_for_chaining(self, hooks):
        assert hooks.hook("a", lambda: None).hook("b", lambda: None) is hooks
        assert hooks.hook_names() == ["a", "b"]
        assert hooks.has_hooks("a")
        assert not hooks.has_hooks("c")

    def test_invalid_registrations(self, hooks):
        with pytest.raises(InvalidHookError):
            hooks.hook("", lambda: None)
        with pytest.raises(InvalidHookError):
            hooks.hook("foo", "not callable")
        with pytest.raises(InvalidHookError):
            hooks.hook("foo", lambda: None, 123)
        with pytest.raises(InvalidHookError):
            hooks.hook("foo", lambda: None, None, "high")

        assert not hooks.has_hooks("foo")

    @pytest.mark.asyncio
    async def test_register_decorator(self, hooks):
        rolled_back = []

        @hooks.register("foo", priority=5, error_handler=lambda err: rolled_back.append(err))
        def second():
            return "second"

        @hooks.register("foo", priority=1)
        async def first():
            return "first"

        assert second() == "second"
        assert await hooks.trigger("foo") == ["first", "second"]

    @pytest.mark.asyncio
    async def test_callback_style_hooks(self, hooks):
        def handler(done, arg):
            asyncio.get_running_loop().call_soon(done, None, f"A{arg}")

        hooks.hook_callback("foo", handler)
        hooks.hook("foo", lambda arg: f"B{arg}")

        assert await hooks.trigger("foo", 1) == ["A1", "B1"]

    @pytest.mark.asyncio
    async def test_callback_style_error_and_cleanup(self, hooks):
        error = Boom("cb")
        cleaned = []

        def cleanup(done, err):
            cleaned.append(err)
            done()

        def fail(done):
            asyncio.get_running_loop().call_soon(done, error)

        hooks.hook_callback("foo", lambda done: done(), cleanup)
        hooks.hook_callback("foo", fail)

        with pytest.raises(Boom) as exc_info:
            await hooks.trigger("foo")

        assert exc_info.value is error
        assert cleaned == [error]

    @pytest.mark.asyncio
    async def test_callback_done_twice_keeps_first_outcome(self, hooks):
        def handler(done):
            done(None, "first")
            done(Boom("ignored"))

        hooks.hook_callback("foo", handler)

        assert await hooks.trigger("foo") == ["first"]


# =============================================================================
# Snapshot isolation
# =============================================================================


class TestSnapshots:
    """A trigger works off the entries present when it started."""

    @pytest.mark.asyncio
    async def test_registration_during_trigger_is_not_visible(self, hooks):
        def add_more():
            hooks.hook("foo", lambda: "added", priority=-100)
            return "original"

        hooks.hook("foo", add_more)

        assert await hooks.trigger("foo") == ["original"]
        assert await hooks.trigger("foo") == ["added", "original"]

    @pytest.mark.asyncio
    async def test_interleaved_triggers_keep_separate_results(self, hooks):
        async def echo(value):
            await asyncio.sleep(0.001 * value)
            return value

        hooks.hook("foo", echo)
        hooks.hook("foo", lambda value: value * 10)

        first, second = await asyncio.gather(hooks.trigger("foo", 3), hooks.trigger("foo", 1))

        assert first == [3, 30]
        assert second == [1, 10]

    @pytest.mark.asyncio
    async def test_trigger_captures_hooks_when_called(self, hooks):
        hooks.hook("foo", lambda: "a")

        pending = hooks.trigger("foo")
        hooks.hook("foo", lambda: "b")

        assert await pending == ["a"]
        assert await hooks.trigger("foo") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_trigger_error_captures_hooks_when_called(self, hooks):
        calls = []
        hooks.hook("foo", lambda: None, lambda err: calls.append("first"))

        pending = hooks.trigger_error("foo", Boom())
        hooks.hook("foo", lambda: None, lambda err: calls.append("late"))
        await pending

        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_trigger_wrap_captures_pre_hooks_when_called(self, hooks):
        calls = []
        hooks.hook("pre-foo", lambda: calls.append("pre"))

        pending = hooks.trigger_wrap("foo", lambda: calls.append("body"))
        hooks.hook("pre-foo", lambda: calls.append("late pre"))
        await pending

        assert calls == ["pre", "body"]
