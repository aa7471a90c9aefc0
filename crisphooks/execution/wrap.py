"""
Wrap orchestration: run ``pre-<name>``, ``<name>``, a body and ``post-<name>``
as one unit.

Each stage is a normal trigger, so a failing stage has already unwound its
own earlier entries by the time the orchestrator sees the error. The
orchestrator then fully unwinds every stage that completed before the
failure, most recent first, and re-raises the original error:

    failure in      stages unwound afterwards
    ----------      -------------------------
    pre-<name>      (none)
    <name>          pre-<name>
    body            <name>, pre-<name>
    post-<name>     <name>, pre-<name>

The body runs "inside" ``<name>``: it has no error handlers of its own and a
body failure reuses the ``<name>`` chain.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from crisphooks.core.exceptions import HookUnwindError
from crisphooks.core.logger import get_logger
from crisphooks.core.types import Pending, outcome_of

if TYPE_CHECKING:  # pragma: no cover
    from crisphooks.hooks import CrispHooks

logger = get_logger(__name__)

PRE_PREFIX = "pre-"
POST_PREFIX = "post-"


def pre_name(name: str) -> str:
    return PRE_PREFIX + name


def post_name(name: str) -> str:
    return POST_PREFIX + name


async def trigger_wrap(
    hooks: "CrispHooks",
    name: str,
    body: Callable[..., Any] | None,
    args: tuple[Any, ...],
    receiver: Any,
    pre_stage: Awaitable[list[Any]],
) -> Any:
    """
    Run the four wrap stages for ``name``.

    Args:
        hooks: Container whose triggers run the stages
        name: Base hook name
        body: Called with ``*args`` between the main and post stages; may
            return an awaitable. ``None`` skips it.
        args: Arguments for every stage and the body
        receiver: Receiver passed to bound hooks
        pre_stage: Pending ``pre-<name>`` trigger, created (and its snapshot
            taken) when the wrap was invoked

    Returns:
        The body's result, or the post stage's results when there is no body
    """
    # Stages that finished, most recent last
    completed: list[str] = []

    try:
        await pre_stage
        completed.append(pre_name(name))

        await hooks.trigger(name, *args, receiver=receiver)
        completed.append(name)

        body_result = None
        if body is not None:
            outcome = outcome_of(body(*args))
            body_result = (
                await outcome.awaitable if isinstance(outcome, Pending) else outcome.value
            )

        post_results = await hooks.trigger(post_name(name), *args, receiver=receiver)
    except HookUnwindError:
        # Cleanup already failed; the remaining stages stay as they are
        raise
    except Exception as e:
        logger.debug(f"Wrap '{name}' failed, unwinding completed stages {completed[::-1]}")
        for stage in reversed(completed):
            await hooks.trigger_error(stage, e, *args, receiver=receiver)
        raise

    return body_result if body is not None else post_results
