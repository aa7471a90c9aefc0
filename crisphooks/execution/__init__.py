"""
Trigger execution: async and sync executors plus the wrap orchestrator.
"""

from crisphooks.execution.executor import AsyncExecutor, BaseExecutor
from crisphooks.execution.sync import SyncExecutor
from crisphooks.execution.wrap import POST_PREFIX, PRE_PREFIX, post_name, pre_name, trigger_wrap

__all__ = [
    "AsyncExecutor",
    "BaseExecutor",
    "POST_PREFIX",
    "PRE_PREFIX",
    "SyncExecutor",
    "post_name",
    "pre_name",
    "trigger_wrap",
]
