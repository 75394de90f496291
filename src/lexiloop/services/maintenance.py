"""Best-effort background maintenance tasks."""
import logging
from concurrent.futures import Executor, Future
from typing import Any, Callable, Optional

from lexiloop import monitoring

logger = logging.getLogger(__name__)


class MaintenanceTask:
    """A callable whose failures are logged and never reach the caller."""

    def __init__(self, name: str, func: Callable[[], Any], executor: Optional[Executor] = None):
        self.name = name
        self.func = func
        self.executor = executor

    def run(self) -> bool:
        """Run the task now. Returns False when it failed."""
        try:
            self.func()
        except Exception as e:
            monitoring.maintenance_failures.labels(task=self.name).inc()
            logger.warning(f"Maintenance task {self.name} failed: {e}")
            return False
        logger.debug(f"Maintenance task {self.name} done")
        return True

    def submit(self) -> Optional[Future]:
        """Fire and forget: hand the task to the executor, or run it inline."""
        if self.executor is None:
            self.run()
            return None
        try:
            return self.executor.submit(self.run)
        except RuntimeError as e:
            # executor already shut down
            logger.warning(f"Could not schedule maintenance task {self.name}: {e}")
            return None


class RefillTask(MaintenanceTask):
    """Tops up a learner's word pool after a session."""

    def __init__(
        self,
        replenish_service,
        learner_id: int,
        level: Optional[str],
        category: Optional[str],
        min_count: Optional[int] = None,
        executor: Optional[Executor] = None,
    ):
        self.learner_id = learner_id
        self.level = level
        self.category = category
        self.min_count = min_count
        super().__init__(
            f"refill:{learner_id}",
            lambda: replenish_service.ensure_minimum(learner_id, level, category, min_count),
            executor,
        )
