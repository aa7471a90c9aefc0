"""
HooksConfig - Unified configuration for hook containers.

Wires together the observability listeners and the behavioral switches that
every CrispHooks instance shares unless it is given its own config.

Example:
    >>> from crisphooks import HooksConfig, configure
    >>>
    >>> configure(HooksConfig(metrics=True, strict_sync=False))
    >>>
    >>> # Or from the environment / a .env file
    >>> configure(HooksConfig.from_env())
    >>>
    >>> # Or from YAML
    >>> configure(HooksConfig.from_file("crisphooks.yaml"))

YAML layout:
    observability:
      logging:
        enabled: true
      metrics:
        enabled: ${CRISPHOOKS_METRICS:-true}
      # or the shorthand
      # metrics: false
    execution:
      strict_sync: true
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from crisphooks.core.env import _FALSE_VALUES, _TRUE_VALUES, get_env
from crisphooks.core.listeners import HookListener, LoggingHookListener, MetricsHookListener
from crisphooks.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HooksConfig:
    """
    Configuration shared by hook containers.

    Attributes:
        logging: Log trigger lifecycle events (True/False or a listener instance)
        metrics: Collect trigger metrics (True/False or a listener instance)
        listeners: Additional listeners notified after the built-in ones
        strict_sync: Synchronous triggers refuse to start when a registered
            handler is declared asynchronous
    """

    logging: bool | HookListener = True
    metrics: bool | HookListener = True
    listeners: list[HookListener] = field(default_factory=list)
    strict_sync: bool = True

    # Internal: built listeners list
    _listeners: list[HookListener] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._listeners = self._build_listeners()

    def _build_listeners(self) -> list[HookListener]:
        built: list[HookListener] = []

        if isinstance(self.logging, HookListener):
            built.append(self.logging)
        elif self.logging:
            built.append(LoggingHookListener())

        if isinstance(self.metrics, HookListener):
            built.append(self.metrics)
        elif self.metrics:
            built.append(MetricsHookListener())

        built.extend(self.listeners)
        return built

    @property
    def active_listeners(self) -> list[HookListener]:
        """Built-in and user listeners, in notification order."""
        return self._listeners

    @property
    def metrics_listener(self) -> MetricsHookListener | None:
        for listener in self._listeners:
            if isinstance(listener, MetricsHookListener):
                return listener
        return None

    def with_listeners(self, *listeners: HookListener) -> HooksConfig:
        """Create a new config with extra listeners (immutable update)."""
        return replace(self, listeners=[*self.listeners, *listeners])

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> HooksConfig:
        """
        Create configuration from environment variables.

        Environment variables:
            CRISPHOOKS_LOGGING: Enable lifecycle logging (true/false)
            CRISPHOOKS_METRICS: Enable in-memory metrics (true/false)
            CRISPHOOKS_STRICT_SYNC: Reject sync triggers over async hooks (true/false)

        Args:
            load_dotenv: If True, loads .env file before reading variables
        """
        env = get_env()
        if load_dotenv:
            env.load()

        return cls(
            logging=env.get_bool("CRISPHOOKS_LOGGING", True),
            metrics=env.get_bool("CRISPHOOKS_METRICS", True),
            strict_sync=env.get_bool("CRISPHOOKS_STRICT_SYNC", True),
        )

    @classmethod
    def from_file(cls, file_path: str | Path, substitute_env: bool = True) -> HooksConfig:
        """
        Load configuration from a YAML file.

        Supports environment variable substitution using ${VAR} syntax.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(file_path)
        if not path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f)

        if not data:
            return cls()

        if substitute_env:
            env = get_env()
            env.load()
            data = env.substitute_dict(data)

        obs_data = data.get("observability", {}) or {}
        exec_data = data.get("execution", {}) or {}

        return cls(
            logging=_section_enabled(obs_data, "logging"),
            metrics=_section_enabled(obs_data, "metrics"),
            strict_sync=_as_bool(exec_data.get("strict_sync", True)),
        )


def _section_enabled(obs_data: dict[str, Any], key: str) -> bool:
    # Accepts `metrics: false` as well as `metrics: {enabled: false}`
    section = obs_data.get(key)
    if section is None:
        return True
    if isinstance(section, dict):
        return _as_bool(section.get("enabled", True))
    return _as_bool(section)


def _as_bool(value: Any) -> bool:
    # Substituted values arrive as strings
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        msg = f"Expected a boolean, got {value!r}"
        raise ValueError(msg)
    return bool(value)


# Global configuration singleton
_global_config: HooksConfig | None = None


def get_config() -> HooksConfig:
    """Get the global hooks configuration."""
    global _global_config
    if _global_config is None:
        _global_config = HooksConfig()
    return _global_config


def configure(config: HooksConfig) -> None:
    """Set the global hooks configuration."""
    global _global_config
    _global_config = config
    logger.info(
        f"Hooks configured: listeners={[type(lst).__name__ for lst in config.active_listeners]}, "
        f"strict_sync={config.strict_sync}"
    )


def reset_config() -> None:
    """Drop the global configuration (useful for tests)."""
    global _global_config
    _global_config = None
