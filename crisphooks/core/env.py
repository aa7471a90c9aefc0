"""
Environment variable access with .env file support.

All CrispHooks settings read from the environment use the ``CRISPHOOKS_``
prefix. ``.env`` files are loaded through python-dotenv; ``${VAR}`` references
in YAML configuration files are expanded here too.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")

# ${VAR}, ${VAR:-default}, ${VAR:?error}
_BRACED_PATTERN = re.compile(r"\$\{([^}:]+)(?::([?-])([^}]*))?\}")


class EnvManager:
    """
    Reads CrispHooks settings from the process environment.

    Example:
        >>> env = EnvManager()
        >>> env.load()  # Loads .env if exists
        >>> env.get_bool("CRISPHOOKS_STRICT_SYNC", True)
        True
    """

    def __init__(self, project_root: Path | str | None = None, auto_load: bool = False):
        """
        Args:
            project_root: Directory searched for ``.env`` (default: cwd)
            auto_load: Load ``.env`` immediately
        """
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self._loaded = False

        if auto_load:
            self.load()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, env_file: str | Path | None = None, override: bool = False) -> bool:
        """
        Load environment variables from a .env file.

        Args:
            env_file: Path to .env file (defaults to .env in project root)
            override: Whether to override existing environment variables

        Returns:
            True if the file existed and was loaded
        """
        env_path = Path(env_file) if env_file is not None else self.project_root / ".env"
        if not env_path.exists():
            return False

        load_dotenv(env_path, override=override)
        self._loaded = True
        return True

    def get(self, key: str, default: str | None = None, required: bool = False) -> str | None:
        """
        Get an environment variable value.

        Raises:
            ValueError: If required=True and variable not found
        """
        value = os.environ.get(key, default)

        if required and value is None:
            msg = f"Required environment variable not set: {key}"
            raise ValueError(msg)

        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = (self.get(key) or "").strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        return default

    def substitute(self, text: str) -> str:
        """
        Expand ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?error}`` in text.

        Unset ``${VAR}`` references are left as they are.

        Raises:
            ValueError: For an unset ``${VAR:?error}``
        """

        def replace(match: re.Match) -> str:
            var_name, operator, operand = match.group(1), match.group(2), match.group(3)
            value = os.environ.get(var_name)

            if operator == "-":
                return value if value is not None else operand
            if operator == "?":
                if value is None:
                    raise ValueError(operand or f"Required variable not set: {var_name}")
                return value
            return value if value is not None else match.group(0)

        return _BRACED_PATTERN.sub(replace, text)

    def substitute_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively substitute environment variables in string values."""
        return {key: self._substitute_value(value) for key, value in data.items()}

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.substitute(value)
        if isinstance(value, dict):
            return self.substitute_dict(value)
        if isinstance(value, list):
            return [self._substitute_value(item) for item in value]
        return value


# Global instance
_global_env: EnvManager | None = None


def get_env() -> EnvManager:
    """Get the global environment manager instance."""
    global _global_env
    if _global_env is None:
        _global_env = EnvManager()
    return _global_env
