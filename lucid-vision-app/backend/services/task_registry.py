"""
Background task registry for vision synthesis work.

Tasks are fire-and-forget from the caller's point of view: each one runs at
most once, is never retried, and its failure is logged rather than raised.
The registry keeps a handle on every task so shutdown can drain or cancel
them in priority order.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Set

import structlog

from utils.error_handling import log_exception

logger = structlog.get_logger(__name__)


class TaskPriority(str, Enum):
    """Task priority levels for shutdown ordering"""
    CRITICAL = "critical"  # Must complete before shutdown
    HIGH = "high"         # Should complete if possible
    NORMAL = "normal"     # Can be cancelled


class TaskInfo:
    """Information about a registered task"""
    def __init__(self, task: asyncio.Task, name: str, priority: TaskPriority, vision_id: Optional[str]):
        self.task = task
        self.name = name
        self.priority = priority
        self.vision_id = vision_id
        self.created_at = datetime.now(timezone.utc)

    def __repr__(self):
        return f"TaskInfo(name={self.name}, priority={self.priority}, done={self.task.done()})"


class TaskRegistry:
    """Registry for detached background tasks"""

    def __init__(self):
        self._tasks: Dict[str, TaskInfo] = {}
        self._task_counter = 0
        self._shutdown_event = asyncio.Event()

    def spawn(
        self,
        coro: Awaitable[Any],
        name: str,
        *,
        vision_id: Optional[str] = None,
        priority: TaskPriority = TaskPriority.NORMAL,
    ) -> Optional[str]:
        """Schedule ``coro`` on the running loop and return its task id.

        Returns None (and closes the coroutine) once shutdown has begun.
        """
        if self.is_shutting_down():
            logger.warning("task_registry.rejected_during_shutdown", name=name, vision_id=vision_id)
            close = getattr(coro, "close", None)
            if close:
                close()
            return None

        self._task_counter += 1
        task_id = f"{name}:{self._task_counter}"
        task = asyncio.get_running_loop().create_task(
            self._run(coro, name, vision_id),
            name=task_id,
        )
        self._tasks[task_id] = TaskInfo(task, name, priority, vision_id)

        def _on_task_done(_: asyncio.Task) -> None:
            self._tasks.pop(task_id, None)

        task.add_done_callback(_on_task_done)
        logger.debug("task_registry.registered", task_id=task_id, priority=priority.value)
        return task_id

    @staticmethod
    async def _run(coro: Awaitable[Any], name: str, vision_id: Optional[str]) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.info("task_registry.cancelled", name=name, vision_id=vision_id)
            raise
        except Exception as e:
            log_exception("background_task_failed", e, task=name, vision_id=vision_id)

    def get_active_tasks(self) -> Dict[str, Dict[str, Any]]:
        """Get information about all active tasks"""
        return {
            task_id: {
                "name": info.name,
                "priority": info.priority.value,
                "vision_id": info.vision_id,
                "created_at": info.created_at.isoformat(),
                "done": info.task.done(),
            }
            for task_id, info in self._tasks.items()
        }

    async def wait_idle(self, timeout: Optional[float] = None) -> None:
        """Wait until every task scheduled so far (and any it spawns) finishes."""
        while self._tasks:
            pending: List[asyncio.Task] = [info.task for info in self._tasks.values()]
            done, still_pending = await asyncio.wait(pending, timeout=timeout)
            if still_pending:
                return

    async def graceful_shutdown(self, timeout: float = 30.0) -> Dict[str, str]:
        """Perform graceful shutdown of all tasks"""
        logger.info("Starting graceful task shutdown...")
        self._shutdown_event.set()

        shutdown_results: Dict[str, str] = {}
        tasks_by_priority: Dict[TaskPriority, List[tuple]] = {p: [] for p in TaskPriority}
        for task_id, info in list(self._tasks.items()):
            if not info.task.done():
                tasks_by_priority[info.priority].append((task_id, info))

        loop = asyncio.get_running_loop()
        remaining_timeout = timeout

        # Critical tasks - wait for completion
        for task_id, info in tasks_by_priority[TaskPriority.CRITICAL]:
            if remaining_timeout <= 0:
                break
            start_time = loop.time()
            try:
                await asyncio.wait_for(asyncio.shield(info.task), timeout=min(remaining_timeout, 10.0))
                shutdown_results[task_id] = "completed"
            except asyncio.TimeoutError:
                logger.warning(f"Critical task {info.name} timed out, cancelling...")
                info.task.cancel()
                shutdown_results[task_id] = "timeout_cancelled"
            remaining_timeout -= loop.time() - start_time

        # High priority tasks - give them some time
        high = tasks_by_priority[TaskPriority.HIGH]
        if high and remaining_timeout > 0:
            done, _ = await asyncio.wait(
                [info.task for _, info in high],
                timeout=min(remaining_timeout, 5.0),
            )
            for task_id, info in high:
                if info.task in done:
                    shutdown_results[task_id] = "completed"
                else:
                    info.task.cancel()
                    shutdown_results[task_id] = "cancelled"

        # Normal priority - cancel immediately
        for task_id, info in tasks_by_priority[TaskPriority.NORMAL]:
            if not info.task.done():
                info.task.cancel()
                shutdown_results[task_id] = "cancelled"

        remaining: Set[asyncio.Task] = {info.task for info in self._tasks.values()}
        if remaining:
            await asyncio.gather(*remaining, return_exceptions=True)

        logger.info("Task shutdown complete", results=shutdown_results)
        return shutdown_results

    def is_shutting_down(self) -> bool:
        """Check if the system is shutting down"""
        return self._shutdown_event.is_set()
