from functools import partial

from brewstrap.config import PlanConfig, TaskConfig, TaskKind
from brewstrap.runner import (
    CallableAction,
    CommandAction,
    Report,
    TaskOutcome,
    TaskRunner,
)

from .conditions import ConditionChecker
from .files import ensure_line, has_line, write_file
from .packages import Package, PackageKind, PackageManager, ensure_package
from .patch import ConfigPatcher


class Provisioner:
    def __init__(
        self,
        plan: PlanConfig,
        runner: TaskRunner,
        manager: PackageManager,
        patcher: ConfigPatcher | None = None,
        checker: ConditionChecker | None = None,
    ):
        self.plan = plan
        self.runner = runner
        self.manager = manager
        self.patcher = patcher or ConfigPatcher()
        self.checker = checker or ConditionChecker(manager)

    def run(self, report: Report | None = None) -> Report:
        report = report if report is not None else Report()

        for task in self.plan:
            try:
                outcomes = self.run_task(task)
            except Exception as exc:
                outcomes = [self.runner.fail(task.name, exc)]
            report = report.record_all(outcomes)

        return report

    def run_task(self, task: TaskConfig) -> list[TaskOutcome]:
        log = self.runner.log

        if task.unless and not self.checker.unmet(task.unless):
            conditions = ", ".join(str(c) for c in task.unless)
            log.section(f"SKIP: {task.name}")
            return [self.runner.skip(task.name, f"{task.name}: already satisfied ({conditions})")]

        missing = self.checker.unmet(task.requires)
        if missing:
            conditions = ", ".join(str(c) for c in missing)
            log.section(f"SKIP: {task.name}")
            return [self.runner.warn(task.name, f"{task.name}: skipped, missing {conditions}")]

        match task.kind:
            case TaskKind.FORMULA | TaskKind.CASK:
                return self._ensure_packages(task)
            case TaskKind.COMMAND:
                log.section(f"RUN: {task.name}")
                action = CommandAction(
                    task.command, env=task.env, working_dir=task.working_dir
                )
                return [self.runner.run(task.name, action)]
            case TaskKind.WRITE_FILE:
                log.section(f"WRITE: {task.path}")
                action = CallableAction(partial(_write, task))
                return [self.runner.run(task.name, action)]
            case TaskKind.ENSURE_LINE:
                log.section(f"LINE: {task.path}")
                if has_line(task.path, task.line):
                    return [self.runner.skip(task.name, f"line already in {task.path}")]
                action = CallableAction(partial(_append, task))
                return [self.runner.run(task.name, action)]
            case TaskKind.PATCH_CONFIG:
                log.section(f"PATCH: {task.path}")
                action = CallableAction(partial(self._patch, task))
                return [self.runner.run(task.name, action)]
            case _:
                raise AssertionError("Unreachable")

    def _ensure_packages(self, task: TaskConfig) -> list[TaskOutcome]:
        kind = PackageKind.CASK if task.kind is TaskKind.CASK else PackageKind.FORMULA
        self.runner.log.section(f"PACKAGES: {task.name}")
        return [
            ensure_package(Package(kind, name), self.manager, self.runner).outcome
            for name in task.packages
        ]

    def _patch(self, task: TaskConfig) -> str:
        lines = []
        for key, value in task.settings.items():
            patched = self.patcher.upsert(task.path, key, value)
            lines.append(f"{key}: {patched.action}")
            if patched.backup is not None:
                lines.append(f"backup: {patched.backup}")
        return "\n".join(lines)


def _write(task: TaskConfig) -> str:
    return f"wrote {write_file(task.path, task.content, task.mode)}"


def _append(task: TaskConfig) -> str:
    ensure_line(task.path, task.line)
    return f"appended to {task.path}"
