import numbers
from collections.abc import Iterator

from crisphooks.core.exceptions import InvalidHookError
from crisphooks.core.logger import get_logger
from crisphooks.core.types import ErrorHandler, Handler, HookEntry, HookSet, is_async_callable

logger = get_logger(__name__)


class HookRegistry:
    """
    Per-container storage of hook sets.

    Maps hook names to their HookSet. Sets are created on first registration
    and live as long as the registry. Registration is single-writer: the
    registry is not locked, triggers work off snapshots instead.
    """

    def __init__(self) -> None:
        self._sets: dict[str, HookSet] = {}

    def add_hook(
        self,
        name: str,
        handler: Handler,
        error_handler: ErrorHandler | None = None,
        priority: int | float = 0,
        *,
        bind: bool = False,
        async_only: bool = False,
    ) -> HookEntry:
        """
        Register a handler under ``name``.

        Args:
            name: Hook name, any non-empty string
            handler: Called with the trigger arguments
            error_handler: Called with (error, *args) when a later hook fails
            priority: Lower runs first, ties run in registration order
            bind: Pass the trigger receiver as first argument
            async_only: Force the entry to be treated as asynchronous

        Returns:
            The new, immutable HookEntry

        Raises:
            InvalidHookError: On a bad name, handler, error handler or priority
        """
        self._validate(name, handler, error_handler, priority)

        hook_set = self._sets.get(name)
        if hook_set is None:
            hook_set = self._sets[name] = HookSet(name=name)

        entry = hook_set.append(
            handler,
            error_handler=error_handler,
            priority=priority,
            bind=bind,
            async_handler=async_only or is_async_callable(handler),
            async_error_handler=error_handler is not None
            and (async_only or is_async_callable(error_handler)),
        )
        logger.debug(
            f"Registered hook #{entry.sequence} for '{name}' "
            f"(priority={priority}, error_handler={error_handler is not None})"
        )
        return entry

    @staticmethod
    def _validate(name, handler, error_handler, priority) -> None:
        if not isinstance(name, str) or not name:
            msg = f"Hook name must be a non-empty string, got {name!r}"
            raise InvalidHookError(msg)
        if not callable(handler):
            msg = f"Handler for hook '{name}' must be callable, got {handler!r}"
            raise InvalidHookError(msg)
        if error_handler is not None and not callable(error_handler):
            msg = f"Error handler for hook '{name}' must be callable, got {error_handler!r}"
            raise InvalidHookError(msg)
        if isinstance(priority, bool) or not isinstance(priority, numbers.Real):
            msg = f"Priority for hook '{name}' must be a number, got {priority!r}"
            raise InvalidHookError(msg)

    def ensure_sorted(self, name: str) -> None:
        """Sort the set for ``name`` if a registration invalidated it."""
        hook_set = self._sets.get(name)
        if hook_set is not None:
            hook_set.ensure_sorted()

    def snapshot(self, name: str) -> tuple[HookEntry, ...]:
        """Sorted, immutable copy of the entries for ``name``."""
        hook_set = self._sets.get(name)
        if hook_set is None:
            return ()
        return hook_set.snapshot()

    def get(self, name: str) -> HookSet | None:
        return self._sets.get(name)

    def count(self, name: str) -> int:
        hook_set = self._sets.get(name)
        return len(hook_set) if hook_set is not None else 0

    def names(self) -> list[str]:
        return list(self._sets)

    def __contains__(self, name: object) -> bool:
        return name in self._sets

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sets))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(names={len(self._sets)})"
