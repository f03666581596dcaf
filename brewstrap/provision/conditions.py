from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Iterable

from brewstrap.config import Condition, ConditionKind

from .packages import Package, PackageKind, PackageManager


def package_ref(target: str) -> Package:
    """Parse ``NAME``, ``formula:NAME`` or ``cask:NAME``."""
    kind, sep, name = target.partition(":")
    if not sep:
        return Package(PackageKind.FORMULA, target.strip())
    return Package(PackageKind(kind.strip()), name.strip())


class ConditionChecker:
    def __init__(
        self,
        manager: PackageManager,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self.manager = manager
        self.which = which

    def holds(self, condition: Condition) -> bool:
        match condition.kind:
            case ConditionKind.BIN:
                return self.which(condition.target) is not None
            case ConditionKind.FORMULA:
                return self.manager.is_installed(
                    Package(PackageKind.FORMULA, condition.target)
                )
            case ConditionKind.CASK:
                return self.manager.is_installed(Package(PackageKind.CASK, condition.target))
            case ConditionKind.FILE:
                return Path(condition.target).expanduser().exists()
            case ConditionKind.AVAILABLE:
                return self.manager.is_available(package_ref(condition.target))
            case _:
                raise AssertionError("Unreachable")

    def unmet(self, conditions: Iterable[Condition]) -> list[Condition]:
        return [c for c in conditions if not self.holds(c)]
