import logging
import time
from typing import Callable

from .actions import Action
from .log import RunLog
from .types import CommandFailed, OutcomeKind, TaskOutcome

logger = logging.getLogger(__name__)


class TaskRunner:
    def __init__(
        self,
        log: RunLog,
        *,
        capture_output: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.log = log
        self.capture_output = capture_output
        self.clock = clock

    def run(self, name: str, action: Action) -> TaskOutcome:
        self.log.start_task(name)

        start = self.clock()
        try:
            output = action.execute()
        except Exception as exc:
            elapsed = self.clock() - start
            logger.debug("task %r raised", name, exc_info=True)
            if self.capture_output and isinstance(exc, CommandFailed):
                self.log.output(exc.output)

            self.log.failure(f"TASK FAILED: {name} (see {self.log.path} for details)")
            self.log.append(logging.INFO, f"END: {name} (failed, {int(elapsed)}s): {exc}")
            return TaskOutcome(name, OutcomeKind.FAILURE, elapsed, str(exc))

        elapsed = self.clock() - start
        if self.capture_output and output:
            self.log.output(output)

        self.log.success(f"TASK SUCCESS: {name}")
        self.log.append(logging.INFO, f"END: {name} (success, {int(elapsed)}s)")
        return TaskOutcome(name, OutcomeKind.SUCCESS, elapsed)

    def fail(self, name: str, exc: Exception) -> TaskOutcome:
        """Record a task that broke before its action could start."""
        logger.debug("task %r aborted", name, exc_info=exc)
        self.log.failure(f"TASK FAILED: {name} (see {self.log.path} for details)")
        self.log.append(logging.INFO, f"ABORTED: {name}: {exc}")
        return TaskOutcome(name, OutcomeKind.FAILURE, detail=str(exc))

    def skip(self, name: str, message: str) -> TaskOutcome:
        self.log.info(message)
        return TaskOutcome(name, OutcomeKind.SUCCESS, detail=message)

    def warn(self, name: str, message: str) -> TaskOutcome:
        self.log.warning(message)
        return TaskOutcome(name, OutcomeKind.WARNING, detail=message)
