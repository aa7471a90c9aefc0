"""
Mongoose-style ``pre``/``post`` naming on top of a hook container.

    >>> hooks = PrePostHooks()
    >>> hooks.pre("save", check_permissions)
    >>> hooks.post("save", invalidate_cache)
    >>> await hooks.trigger_pre("save", doc)     # runs "pre-save"
    >>> await hooks.trigger_wrap("save", store, doc)
"""

from collections.abc import Callable, Coroutine
from typing import Any

from crisphooks.core.types import ErrorHandler, Handler
from crisphooks.execution.wrap import post_name, pre_name
from crisphooks.hooks import CrispHooks


class PrePostHooks:
    """Forwards to a CrispHooks instance, prefixing names with ``pre-``/``post-``."""

    def __init__(self, hooks: CrispHooks | None = None):
        self.hooks = hooks if hooks is not None else CrispHooks()

    def pre(
        self,
        name: str,
        handler: Handler,
        error_handler: ErrorHandler | None = None,
        priority: int | float = 0,
        *,
        bind: bool = False,
    ) -> "PrePostHooks":
        self.hooks.hook(pre_name(name), handler, error_handler, priority, bind=bind)
        return self

    def post(
        self,
        name: str,
        handler: Handler,
        error_handler: ErrorHandler | None = None,
        priority: int | float = 0,
        *,
        bind: bool = False,
    ) -> "PrePostHooks":
        self.hooks.hook(post_name(name), handler, error_handler, priority, bind=bind)
        return self

    def trigger_pre(
        self, name: str, *args: Any, receiver: Any = None
    ) -> Coroutine[Any, Any, list[Any]]:
        return self.hooks.trigger(pre_name(name), *args, receiver=receiver)

    def trigger_post(
        self, name: str, *args: Any, receiver: Any = None
    ) -> Coroutine[Any, Any, list[Any]]:
        return self.hooks.trigger(post_name(name), *args, receiver=receiver)

    def trigger_wrap(
        self, name: str, body: Callable[..., Any] | None, *args: Any, receiver: Any = None
    ) -> Coroutine[Any, Any, Any]:
        return self.hooks.trigger_wrap(name, body, *args, receiver=receiver)
