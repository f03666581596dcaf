from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from brewstrap.runner import Action, CommandAction, TaskOutcome, TaskRunner

logger = logging.getLogger(__name__)


class PackageKind(Enum):
    FORMULA = "formula"
    CASK = "cask"


class PackageState(Enum):
    ALREADY_PRESENT = auto()
    INSTALLED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class Package:
    kind: PackageKind
    name: str

    @property
    def task_name(self) -> str:
        return f"{self.kind.value}:{self.name}"


@dataclass(frozen=True)
class PackageResult:
    package: Package
    state: PackageState
    outcome: TaskOutcome


class PackageManager(Protocol):
    def is_installed(self, package: Package) -> bool: ...

    def is_available(self, package: Package) -> bool: ...

    def install_action(self, package: Package) -> Action: ...


class Homebrew:
    def __init__(self, brew: str = "brew"):
        self.brew = brew

    def available(self) -> bool:
        return shutil.which(self.brew) is not None

    def _kind_args(self, package: Package) -> list[str]:
        return ["--cask"] if package.kind is PackageKind.CASK else []

    def _query(self, verb: str, package: Package) -> bool:
        argv = [self.brew, verb, *self._kind_args(package), package.name]
        try:
            result = subprocess.run(
                argv, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
            )
        except FileNotFoundError:
            logger.debug("%s not found, treating %s as absent", self.brew, package.name)
            return False
        return result.returncode == 0

    def is_installed(self, package: Package) -> bool:
        return self._query("list", package)

    def is_available(self, package: Package) -> bool:
        return self._query("info", package)

    def install_action(self, package: Package) -> Action:
        return CommandAction([self.brew, "install", *self._kind_args(package), package.name])


def ensure_package(
    package: Package, manager: PackageManager, runner: TaskRunner
) -> PackageResult:
    """Install ``package`` unless the manager already reports it present.

    Re-running against an already provisioned machine performs no installs.
    """
    try:
        present = manager.is_installed(package)
    except Exception as exc:
        outcome = runner.fail(package.task_name, exc)
        return PackageResult(package, PackageState.FAILED, outcome)

    if present:
        outcome = runner.skip(
            package.task_name, f"{package.kind.value} {package.name} already installed"
        )
        return PackageResult(package, PackageState.ALREADY_PRESENT, outcome)

    runner.log.section(f"INSTALL: {package.kind.value} {package.name}")
    outcome = runner.run(package.task_name, manager.install_action(package))
    state = PackageState.INSTALLED if outcome.ok else PackageState.FAILED
    return PackageResult(package, state, outcome)
