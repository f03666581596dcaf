import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    DEFAULT_LOG_FILE,
    Condition,
    ConditionKind,
    ConfigError,
    PlanConfig,
    TaskConfig,
    TaskKind,
    UnsupportedConfigFormatError,
)

_PRIMARY_KEYS = ("command", "formula", "cask", "file")
_FILE_KEYS = ("content", "line", "settings")


def load_plan(path: str | Path) -> PlanConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Plan file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Plan path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    plan = _build_plan_config(raw_file)
    return plan


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            return _parse_yaml(path)
        case "toml":
            return _parse_toml(path)
        case "json":
            return _parse_json(path)
        case _:
            raise AssertionError("Unreachable")


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: YAML parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc

    return raw_file


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: JSON parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_plan_config(raw: Mapping[str, Any]) -> PlanConfig:
    tasks = {}

    for field in raw.keys():
        if field not in {"tasks", "log_file", "capture_output", "brew"}:
            raise ConfigError(f"Unknown top-level field: {field}")

    if "tasks" not in raw:
        raise ConfigError("Missing 'tasks' field")

    if not isinstance(raw["tasks"], Mapping):
        raise ConfigError(f"'tasks' must be a mapping, got {type(raw['tasks'])}")

    if len(raw["tasks"]) < 1:
        raise ConfigError("There must be at least one task in the plan")

    for name, fields in raw["tasks"].items():
        if not isinstance(fields, Mapping):
            raise ConfigError(f"{name} must be a mapping")

        if not isinstance(name, str):
            raise ConfigError(f"Task name must be a string, got {type(name)}")

        name_norm = name.strip()

        if len(name_norm) < 1:
            raise ConfigError("A task name can't be empty")

        if name_norm in tasks:
            raise ConfigError(f"Duplicate task name after normalization: {name_norm}")

        tasks[name_norm] = _build_task_config(name_norm, fields)

    log_file = _optional_string(raw, "log_file", "plan") or DEFAULT_LOG_FILE
    brew = _optional_string(raw, "brew", "plan") or "brew"

    capture_output = raw.get("capture_output", False)
    if not isinstance(capture_output, bool):
        raise ConfigError("plan: 'capture_output' should be a boolean")

    return PlanConfig(
        tasks=tasks, log_file=log_file, capture_output=capture_output, brew=brew
    )


def _build_task_config(name: str, fields: Mapping[str, Any]) -> TaskConfig:
    keys = {*_PRIMARY_KEYS, *_FILE_KEYS, "mode", "requires", "unless", "env", "working_dir"}

    for field in fields.keys():
        if field not in keys:
            raise ConfigError(f"{name}: Can't process: {field}")

    primary = [key for key in _PRIMARY_KEYS if key in fields]
    if len(primary) != 1:
        raise ConfigError(
            f"{name}: exactly one of 'command', 'formula', 'cask', 'file' is required"
        )

    task = TaskConfig(name=name, kind=TaskKind.COMMAND)

    match primary[0]:
        case "command":
            task.command = _required_string(fields, "command", name)
        case "formula":
            task.kind = TaskKind.FORMULA
            task.packages = _build_package_list(name, fields["formula"])
        case "cask":
            task.kind = TaskKind.CASK
            task.packages = _build_package_list(name, fields["cask"])
        case "file":
            task.path = _required_string(fields, "file", name)
            _apply_file_fields(task, fields)

    if primary[0] != "file":
        for field in _FILE_KEYS:
            if field in fields:
                raise ConfigError(f"{name}: '{field}' only applies to file tasks")

    if task.kind is not TaskKind.COMMAND:
        for field in ("env", "working_dir"):
            if field in fields:
                raise ConfigError(f"{name}: '{field}' only applies to command tasks")

    if task.kind is not TaskKind.WRITE_FILE and "mode" in fields:
        raise ConfigError(f"{name}: 'mode' only applies with 'content'")

    if "env" in fields:
        if not isinstance(fields["env"], Mapping):
            raise ConfigError(f"{name}: Env should be a mapping")

        for key, item in fields["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"{name}: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError(f"{name}: A key can't be empty")

            if not isinstance(item, str):
                raise ConfigError(f"{name}: {item} should be a string")

            task.env[key.strip()] = item

    if "working_dir" in fields:
        task.working_dir = _required_string(fields, "working_dir", name)

    task.requires = _build_conditions(name, fields, "requires")
    task.unless = _build_conditions(name, fields, "unless")

    return task


def _apply_file_fields(task: TaskConfig, fields: Mapping[str, Any]) -> None:
    name = task.name
    present = [key for key in _FILE_KEYS if key in fields]
    if len(present) != 1:
        raise ConfigError(
            f"{name}: a file task needs exactly one of 'content', 'line', 'settings'"
        )

    match present[0]:
        case "content":
            if not isinstance(fields["content"], str):
                raise ConfigError(f"{name}: 'content' should be a string")
            task.kind = TaskKind.WRITE_FILE
            task.content = fields["content"]
            if "mode" in fields:
                task.mode = _build_mode(name, fields["mode"])
        case "line":
            line = _required_string(fields, "line", name)
            if "\n" in line:
                raise ConfigError(f"{name}: 'line' must be a single line")
            task.kind = TaskKind.ENSURE_LINE
            task.line = line
        case "settings":
            task.kind = TaskKind.PATCH_CONFIG
            task.settings = _build_settings(name, fields["settings"])


def _build_package_list(name: str, raw: Any) -> list[str]:
    if isinstance(raw, str):
        raw = [raw]

    if not isinstance(raw, list):
        raise ConfigError(f"{name}: Packages should be a string or a list.")

    packages = []
    seen = set()
    for item in raw:
        if not isinstance(item, str):
            raise ConfigError(f"{name}: {item} should be a string in the package list")

        package = item.strip()

        if len(package) < 1:
            raise ConfigError(f"{name}: A package name is empty")

        # Allows to ignore duplicate packages
        if package in seen:
            continue

        packages.append(package)
        seen.add(package)

    if not packages:
        raise ConfigError(f"{name}: The package list is empty")

    return packages


def _build_settings(name: str, raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{name}: Settings should be a mapping")

    if len(raw) < 1:
        raise ConfigError(f"{name}: Settings can't be empty")

    settings = {}
    for key, value in raw.items():
        if not isinstance(key, str) or len(key.strip()) < 1:
            raise ConfigError(f"{name}: Setting keys should be non-empty strings")

        if "=" in key:
            raise ConfigError(f"{name}: Setting key '{key}' can't contain '='")

        # bool first, it is an int subclass
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (int, float)):
            value = str(value)
        elif not isinstance(value, str):
            raise ConfigError(f"{name}: {key} should be a string, number or boolean")

        settings[key.strip()] = value

    return settings


def _build_mode(name: str, raw: Any) -> int:
    if not isinstance(raw, str):
        raise ConfigError(f"{name}: 'mode' should be an octal string like \"0755\"")

    try:
        return int(raw, 8)
    except ValueError as exc:
        raise ConfigError(f"{name}: invalid octal mode {raw!r}") from exc


def _build_conditions(name: str, fields: Mapping[str, Any], field: str) -> list[Condition]:
    if field not in fields:
        return []

    if not isinstance(fields[field], list):
        raise ConfigError(f"{name}: '{field}' should be a list")

    conditions = []
    for item in fields[field]:
        if not isinstance(item, str) or ":" not in item:
            raise ConfigError(f"{name}: {item!r} should look like 'kind:target'")

        raw_kind, _, target = item.partition(":")
        try:
            kind = ConditionKind(raw_kind.strip())
        except ValueError as exc:
            raise ConfigError(
                f"{name}: unknown condition kind {raw_kind!r}, "
                "expected bin/formula/cask/file/available"
            ) from exc

        if len(target.strip()) < 1:
            raise ConfigError(f"{name}: condition {item!r} has no target")

        # available:NAME, available:formula:NAME or available:cask:NAME
        if kind is ConditionKind.AVAILABLE and ":" in target:
            package_kind, _, package = target.partition(":")
            if package_kind.strip() not in ("formula", "cask") or not package.strip():
                raise ConfigError(
                    f"{name}: {item!r} should look like 'available:[formula:|cask:]NAME'"
                )

        conditions.append(Condition(kind, target.strip()))

    return conditions


def _required_string(fields: Mapping[str, Any], field: str, name: str) -> str:
    if not isinstance(fields[field], str):
        raise ConfigError(f"{name}: The {field} should be a string")

    if len(fields[field].strip()) < 1:
        raise ConfigError(f"{name}: Please provide a {field} or remove this field")

    return fields[field].strip()


def _optional_string(raw: Mapping[str, Any], field: str, name: str) -> str | None:
    if field not in raw:
        return None

    return _required_string(raw, field, name)
