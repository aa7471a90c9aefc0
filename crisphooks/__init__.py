"""
CrispHooks - Named hooks with priorities, async handlers and error unwinding

Register handlers under a name, trigger the name, and the handlers run one
after another in priority order. Each handler may return an awaitable. When
a handler fails, the error handlers of the handlers that already ran are
called in reverse order before the error propagates.

Usage:
    >>> from crisphooks import CrispHooks
    >>>
    >>> hooks = CrispHooks()
    >>> hooks.hook("order", reserve_stock, release_stock)
    >>> hooks.hook("order", charge_card, refund_card, priority=10)
    >>> await hooks.trigger("order", order)

Pre/post and wrap:
    >>> from crisphooks import PrePostHooks
    >>>
    >>> prepost = PrePostHooks(hooks)
    >>> prepost.pre("save", validate).post("save", reindex)
    >>> await prepost.trigger_wrap("save", store, doc)

EventEmitter style:
    >>> from crisphooks import EventEmitterHooks
    >>>
    >>> events = EventEmitterHooks().on("ready", print)
    >>> events.emit("ready", "up")

Configuration:
    >>> from crisphooks import HooksConfig, configure
    >>> configure(HooksConfig.from_env())
"""

from crisphooks.core.config import HooksConfig, configure, get_config, reset_config
from crisphooks.core.exceptions import (
    HookError,
    HookMisuseError,
    HookUnwindError,
    InvalidHookError,
    MissingDependencyError,
)
from crisphooks.core.listeners import (
    HookListener,
    LoggingHookListener,
    MetricsHookListener,
    default_listeners,
)
from crisphooks.core.logger import get_logger, set_logger
from crisphooks.core.registry import HookRegistry
from crisphooks.core.types import HookEntry, Immediate, Pending, TriggerPhase
from crisphooks.emitter import EventEmitterHooks
from crisphooks.hooks import CrispHooks
from crisphooks.monitoring.metrics import HookMetrics
from crisphooks.prepost import PrePostHooks

__version__ = "1.0.0"

__all__ = [
    # Containers
    "CrispHooks",
    "EventEmitterHooks",
    "PrePostHooks",
    # Configuration
    "HooksConfig",
    "configure",
    "get_config",
    "reset_config",
    # Exceptions
    "HookError",
    "HookMisuseError",
    "HookUnwindError",
    "InvalidHookError",
    "MissingDependencyError",
    # Listeners
    "HookListener",
    "LoggingHookListener",
    "MetricsHookListener",
    "default_listeners",
    # Storage and types
    "HookEntry",
    "HookRegistry",
    "Immediate",
    "Pending",
    "TriggerPhase",
    # Observability
    "HookMetrics",
    "get_logger",
    "set_logger",
]
