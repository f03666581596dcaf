from __future__ import annotations

import logging
import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Patched:
    path: Path
    key: str
    value: str
    action: str  # "replaced", "appended" or "unchanged"
    backup: Path | None = None


def backup_path(path: Path, stamp: int) -> Path:
    return path.with_name(f"{path.name}.bak.{stamp}")


def upsert_config_line(
    path: str | Path,
    key: str,
    value: str,
    *,
    backup: bool = True,
    stamp: int | None = None,
) -> Patched:
    """Set ``key = value`` in a line-oriented config file.

    The first uncommented ``key =`` line is rewritten in place and any later
    ones are dropped; with no such line the pair is appended. Missing files
    and parent directories are created. When ``backup`` is set and the file
    already existed, a copy is saved as ``<path>.bak.<stamp>`` first.
    """
    path = Path(path).expanduser()
    pattern = re.compile(rf"^\s*{re.escape(key)}\s*=")
    new_line = f"{key} = {value}"

    existed = path.is_file()
    original = path.read_text(encoding="utf-8") if existed else ""

    lines: list[str] = []
    found = False
    for line in original.splitlines(keepends=True):
        if not pattern.match(line):
            lines.append(line)
            continue
        if found:
            continue
        found = True
        ending = line[len(line.rstrip("\r\n")) :]
        lines.append(new_line + (ending or "\n"))

    if not found:
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"
        lines.append(new_line + "\n")

    updated = "".join(lines)
    if existed and updated == original:
        return Patched(path, key, value, "unchanged")

    saved = None
    if backup and existed:
        saved = backup_path(path, stamp if stamp is not None else int(time.time()))
        shutil.copy2(path, saved)
        logger.debug("backed up %s to %s", path, saved)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(updated, encoding="utf-8")
    return Patched(path, key, value, "replaced" if found else "appended", saved)


class ConfigPatcher:
    """Upserts config lines, backing up each pre-existing file once per run."""

    def __init__(self, stamp: int | None = None):
        self.stamp = stamp if stamp is not None else int(time.time())
        self._seen: set[Path] = set()

    def upsert(self, path: str | Path, key: str, value: str) -> Patched:
        resolved = Path(path).expanduser().resolve()
        patched = upsert_config_line(
            resolved, key, value, backup=resolved not in self._seen, stamp=self.stamp
        )
        if patched.action != "unchanged":
            self._seen.add(resolved)
        return patched
