from __future__ import annotations

from pathlib import Path


def write_file(path: str | Path, content: str, mode: int | None = None) -> Path:
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    return path


def has_line(path: str | Path, line: str) -> bool:
    path = Path(path).expanduser()
    if not path.is_file():
        return False
    target = line.strip()
    return any(
        existing.strip() == target
        for existing in path.read_text(encoding="utf-8").splitlines()
    )


def ensure_line(path: str | Path, line: str) -> bool:
    """Append ``line`` unless the file already holds it. Returns True if appended."""
    if has_line(path, line):
        return False

    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    existing = path.read_text(encoding="utf-8") if path.is_file() else ""
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as handle:
        handle.write(f"{prefix}{line}\n")
    return True
