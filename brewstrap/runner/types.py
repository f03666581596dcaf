from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class OutcomeKind(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"


@dataclass(frozen=True)
class TaskOutcome:
    name: str
    kind: OutcomeKind
    elapsed_s: float | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True)
class Report:
    """Outcome buckets for one run, in recording order.

    A report is never mutated: ``record`` hands back a new one, so callers
    thread it through their loop and keep the last value.
    """

    succeeded: tuple[str, ...] = ()
    warned: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    timings: tuple[tuple[str, float], ...] = ()

    def record(self, outcome: TaskOutcome) -> Report:
        timings = self.timings
        if outcome.elapsed_s is not None:
            timings = timings + ((outcome.name, outcome.elapsed_s),)

        match outcome.kind:
            case OutcomeKind.SUCCESS:
                return replace(
                    self, succeeded=self.succeeded + (outcome.name,), timings=timings
                )
            case OutcomeKind.WARNING:
                return replace(self, warned=self.warned + (outcome.name,), timings=timings)
            case OutcomeKind.FAILURE:
                return replace(self, failed=self.failed + (outcome.name,), timings=timings)
            case _:
                raise AssertionError("Unreachable")

    def record_all(self, outcomes: list[TaskOutcome]) -> Report:
        report = self
        for outcome in outcomes:
            report = report.record(outcome)
        return report

    @property
    def total_elapsed(self) -> float:
        return sum(secs for _, secs in self.timings)

    def __len__(self) -> int:
        return len(self.succeeded) + len(self.warned) + len(self.failed)


class ActionError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class CommandFailed(ActionError):
    def __init__(self, command: str, returncode: int, output: str = ""):
        super().__init__(f"Command exited with {returncode}: {command}")
        self.command = command
        self.returncode = returncode
        self.output = output
