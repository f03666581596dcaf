from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

SUCCESS = 25
FAILURE = 45

logging.addLevelName(SUCCESS, "SUCCESS")
logging.addLevelName(FAILURE, "FAILURE")

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

RUN_HEADER = "==== provisioning run started ===="
RUN_FOOTER = "==== provisioning run finished ===="
SEPARATOR = "=" * 65

LEVEL_STYLES = {
    logging.INFO: "blue",
    SUCCESS: "green",
    FAILURE: "red",
    logging.WARNING: "yellow",
}


class RunLog:
    """Durable, append-only run log with a colored terminal echo.

    Use it as a context manager: the file handler is opened on enter and
    closed on every exit path, so an interrupted run still leaves a readable
    trail. Every record is flushed as it is written.
    """

    def __init__(self, path: str | Path, console: Console | None = None):
        self.path = Path(path).expanduser().resolve()
        self.console = console or Console(highlight=False, soft_wrap=True)
        self._logger = logging.getLogger("brewstrap.runlog")
        self._logger.propagate = False
        self._logger.setLevel(logging.INFO)
        self._handler: logging.FileHandler | None = None

    def __enter__(self) -> RunLog:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def open(self) -> None:
        if self._handler is not None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        self._logger.addHandler(handler)
        self._handler = handler

    def close(self) -> None:
        if self._handler is None:
            return

        handler, self._handler = self._handler, None
        self._logger.removeHandler(handler)
        handler.flush()
        handler.close()

    def append(self, level: int, message: str) -> None:
        """Write one line to the log file only."""
        if self._handler is None:
            raise RuntimeError(f"Run log is not open: {self.path}")
        self._logger.log(level, message)

    def emit(self, level: int, message: str) -> None:
        self.console.print(message, style=LEVEL_STYLES.get(level), markup=False)
        self.append(level, message)

    def info(self, message: str) -> None:
        self.emit(logging.INFO, message)

    def success(self, message: str) -> None:
        self.emit(SUCCESS, message)

    def failure(self, message: str) -> None:
        self.emit(FAILURE, message)

    def warning(self, message: str) -> None:
        self.emit(logging.WARNING, message)

    def header(self, plan_path: str | Path | None = None) -> None:
        self.append(logging.INFO, RUN_HEADER)
        if plan_path is not None:
            self.append(logging.INFO, f"Plan: {plan_path}")

    def footer(self, succeeded: int, warned: int, failed: int, total_s: float) -> None:
        self.append(logging.INFO, RUN_FOOTER)
        self.append(
            logging.INFO,
            f"Successful tasks: {succeeded}, Warnings: {warned}, "
            f"Failed tasks: {failed}, Timing total (s): {int(total_s)}",
        )

    def section(self, title: str) -> None:
        self.console.print(f"\n{SEPARATOR}\n  {title}\n{SEPARATOR}", style="bold", markup=False)
        self.append(logging.INFO, f"== {title} ==")

    def start_task(self, name: str) -> None:
        self.console.print(f"\n>>> START TASK: {name}", style="bold", markup=False)
        self.append(logging.INFO, f"START: {name}")

    def output(self, text: str) -> None:
        for line in text.splitlines():
            self.append(logging.INFO, f"  | {line}")
