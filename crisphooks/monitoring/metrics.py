"""
In-memory metrics collection for hook triggers
"""

from typing import Any


class HookMetrics:
    """Collect and expose trigger metrics"""

    def __init__(self):
        self.metrics = {
            "total_triggered": 0,
            "total_successful": 0,
            "total_failed": 0,
            "total_cleanups": 0,
            "total_cleanup_failures": 0,
            "average_trigger_time": 0.0,
            "by_hook_name": {},
        }

    def record_trigger(self, hook_name: str, success: bool, duration: float):
        """Record a finished trigger"""
        self.metrics["total_triggered"] += 1
        self.metrics["total_successful" if success else "total_failed"] += 1
        self._update_average_time(duration)
        self._update_hook_stats(hook_name, "success" if success else "failed")

    def record_cleanup(self, hook_name: str, failed: bool = False):
        """Record an error handler run during an unwind"""
        self.metrics["total_cleanups"] += 1
        self._update_hook_stats(hook_name, "cleanups")
        if failed:
            self.metrics["total_cleanup_failures"] += 1
            self._update_hook_stats(hook_name, "cleanup_failures")

    def _update_average_time(self, duration: float) -> None:
        total_time = self.metrics["average_trigger_time"] * (
            self.metrics["total_triggered"] - 1
        )
        self.metrics["average_trigger_time"] = (
            total_time + duration
        ) / self.metrics["total_triggered"]

    def _update_hook_stats(self, hook_name: str, counter: str) -> None:
        if hook_name not in self.metrics["by_hook_name"]:
            self.metrics["by_hook_name"][hook_name] = {
                "count": 0,
                "success": 0,
                "failed": 0,
                "cleanups": 0,
                "cleanup_failures": 0,
            }

        stats = self.metrics["by_hook_name"][hook_name]
        stats[counter] += 1
        if counter in ("success", "failed"):
            stats["count"] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Get all metrics"""
        success_rate = (
            self.metrics["total_successful"] / self.metrics["total_triggered"] * 100
            if self.metrics["total_triggered"] > 0
            else 0
        )

        return {
            **self.metrics,
            "success_rate": f"{success_rate:.2f}%",
        }

    def reset(self) -> None:
        self.__init__()
