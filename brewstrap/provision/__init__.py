from .conditions import ConditionChecker
from .files import ensure_line, has_line, write_file
from .packages import (
    Homebrew,
    Package,
    PackageKind,
    PackageManager,
    PackageResult,
    PackageState,
    ensure_package,
)
from .patch import ConfigPatcher, Patched, upsert_config_line
from .provisioner import Provisioner

__all__ = [
    "ConditionChecker",
    "ConfigPatcher",
    "Homebrew",
    "Package",
    "PackageKind",
    "PackageManager",
    "PackageResult",
    "PackageState",
    "Patched",
    "Provisioner",
    "ensure_line",
    "ensure_package",
    "has_line",
    "upsert_config_line",
    "write_file",
]
