"""
Core building blocks for CrispHooks: storage, configuration, listeners and errors.
"""

from crisphooks.core.config import HooksConfig, configure, get_config, reset_config
from crisphooks.core.env import EnvManager, get_env
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
from crisphooks.core.logger import NullLogger, disable_logging, get_logger, set_logger
from crisphooks.core.registry import HookRegistry
from crisphooks.core.types import (
    HandlerOutcome,
    HookEntry,
    HookSet,
    Immediate,
    Pending,
    TriggerPhase,
    outcome_of,
)

__all__ = [
    # Config
    "HooksConfig",
    "configure",
    "get_config",
    "reset_config",
    "EnvManager",
    "get_env",
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
    # Logger
    "NullLogger",
    "disable_logging",
    "get_logger",
    "set_logger",
    # Storage
    "HookRegistry",
    "HookEntry",
    "HookSet",
    # Types
    "HandlerOutcome",
    "Immediate",
    "Pending",
    "TriggerPhase",
    "outcome_of",
]
