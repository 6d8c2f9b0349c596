"""Sequential, fail-fast task execution.

TaskExecutor runs one pipeline at a time, in order, and stops at the first
failing task. SerialTrigger sits in front of it for change-triggered runs so
overlapping triggers collapse into a single pending run instead of racing
over the same bundle directory.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from themewatch.core.protocols import Logger
from themewatch.exceptions import PipelineStepFailure
from themewatch.pipeline.tasks import Pipeline, Task

TaskHandler = Callable[[], object]

T = TypeVar('T')


class TaskRegistry:
    """Maps each Task to the callable that performs it.

    A handler signals failure by returning False or by raising. Any other
    return value (including None) counts as success.
    """

    def __init__(self, handlers: Optional[Dict[Task, TaskHandler]] = None):
        self._handlers: Dict[Task, TaskHandler] = dict(handlers or {})

    def register(self, task: Task, handler: TaskHandler) -> None:
        self._handlers[task] = handler

    def update(self, handlers: Dict[Task, TaskHandler]) -> None:
        self._handlers.update(handlers)

    def get(self, task: Task) -> Optional[TaskHandler]:
        return self._handlers.get(task)

    def __contains__(self, task: Task) -> bool:
        return task in self._handlers


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    Attributes:
        completed: Tasks that ran and succeeded, in order
        failure: The first failure, or None if every task succeeded
    """
    completed: List[Task] = field(default_factory=list)
    failure: Optional[PipelineStepFailure] = None

    @property
    def success(self) -> bool:
        return self.failure is None


class TaskExecutor:
    """Runs pipelines strictly in order, short-circuiting on first failure.

    Args:
        registry: Handlers for every task a pipeline may contain
        logger: Logging abstraction
    """

    def __init__(self, registry: TaskRegistry, logger: Logger):
        self.registry = registry
        self.log = logger
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def run(self, pipeline: Pipeline) -> PipelineResult:
        """Execute every task of the pipeline in order.

        Blocks while another pipeline is executing, so two pipelines never
        overlap.

        Returns:
            PipelineResult; on failure it carries the PipelineStepFailure of
            the first failing task and no later task has been invoked.
        """
        with self._lock:
            return self._run_locked(pipeline)

    def _run_locked(self, pipeline: Pipeline) -> PipelineResult:
        result = PipelineResult()

        for task in pipeline:
            handler = self.registry.get(task)
            if handler is None:
                result.failure = PipelineStepFailure(
                    task, LookupError(f"No handler registered for task '{task.value}'")
                )
                break

            self.log.debug(f"Starting '{task.value}'")
            try:
                outcome = handler()
            except PipelineStepFailure as e:
                result.failure = e
                break
            except Exception as e:
                result.failure = PipelineStepFailure(task, e)
                break

            if outcome is False:
                result.failure = PipelineStepFailure(task)
                break

            result.completed.append(task)
            self.log.debug(f"Finished '{task.value}'")

        return result

    def run_or_raise(self, pipeline: Pipeline) -> PipelineResult:
        """Like run(), but raise the PipelineStepFailure instead of returning it."""
        result = self.run(pipeline)
        if result.failure is not None:
            raise result.failure
        return result


class SerialTrigger(Generic[T]):
    """Serializes triggers into a single worker with one pending-run slot.

    While a run is in flight, a new trigger is parked in the pending slot,
    replacing any trigger already parked there. The thread that owns the
    current run drains the slot before returning, so every trigger either
    runs or is superseded by a newer one.

    Args:
        worker: Called once per accepted trigger, never concurrently
    """

    def __init__(self, worker: Callable[[T], object]):
        self.worker = worker
        self._lock = threading.Lock()
        self._running = False
        self._pending: Optional[T] = None
        self._has_pending = False

    @property
    def running(self) -> bool:
        return self._running

    def trigger(self, item: T) -> bool:
        """Run item now, or park it if a run is already in flight.

        Returns:
            True if this call ran the worker, False if the item was parked
        """
        with self._lock:
            if self._running:
                self._pending = item
                self._has_pending = True
                return False
            self._running = True

        current = item
        try:
            while True:
                self.worker(current)
                with self._lock:
                    if not self._has_pending:
                        self._running = False
                        return True
                    current = self._pending
                    self._pending = None
                    self._has_pending = False
        except BaseException:
            with self._lock:
                self._running = False
                self._pending = None
                self._has_pending = False
            raise
