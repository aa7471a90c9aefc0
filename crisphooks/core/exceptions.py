"""
All hook-related exceptions

Handler failures are never wrapped: a trigger re-raises whatever the failing
handler raised. The classes below cover the engine's own conditions.
"""

from typing import Any


class HookError(Exception):
    """Base hook error"""


class InvalidHookError(HookError, ValueError):
    """Invalid hook registration (bad name, handler or priority)"""


class HookMisuseError(HookError):
    """
    Raised when a synchronous trigger meets asynchronous work.

    Either a registered handler is declared asynchronous (``async def`` or
    callback-style) and the synchronous trigger refuses to start, or a handler
    returned an awaitable while no event loop is running.
    """

    def __init__(self, hook_name: str, message: str):
        self.hook_name = hook_name
        super().__init__(message)


class HookUnwindError(HookError):
    """
    An error handler failed while cleaning up after another failure.

    This is more severe than the failure that started the unwind: the cleanup
    could not complete. It is always raised chained from the cleanup error and
    keeps the original failure for inspection.
    """

    def __init__(
        self,
        hook_name: str,
        index: int,
        original_error: Any,
        cleanup_error: BaseException,
    ):
        self.hook_name = hook_name
        self.index = index
        self.original_error = original_error
        self.cleanup_error = cleanup_error
        super().__init__(
            f"Error handler #{index} for hook '{hook_name}' failed while "
            f"unwinding {original_error!r}: {cleanup_error!r}"
        )


class MissingDependencyError(HookError):
    """
    Raised when an optional dependency is not installed.

    This exception provides clear installation instructions to help users
    quickly resolve missing package issues.
    """

    INSTALL_COMMANDS = {
        "prometheus_client": "pip install 'crisphooks[metrics]'",
    }

    def __init__(self, package: str, feature: str | None = None):
        self.package = package
        self.feature = feature

        install_cmd = self.INSTALL_COMMANDS.get(package, f"pip install {package}")

        if feature:
            message = (
                f"\n╔══════════════════════════════════════════════════════════════╗\n"
                f"║  Missing Dependency: {package:<40} ║\n"
                f"╠══════════════════════════════════════════════════════════════╣\n"
                f"║  Required for: {feature:<45} ║\n"
                f"║  Install with: {install_cmd:<45} ║\n"
                f"╚══════════════════════════════════════════════════════════════╝"
            )
        else:
            message = (
                f"\n╔══════════════════════════════════════════════════════════════╗\n"
                f"║  Missing Dependency: {package:<40} ║\n"
                f"╠══════════════════════════════════════════════════════════════╣\n"
                f"║  Install with: {install_cmd:<45} ║\n"
                f"╚══════════════════════════════════════════════════════════════╝"
            )

        super().__init__(message)
