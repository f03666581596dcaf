# tests/test_config_loader.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from brewstrap.config.loader import load_plan
from brewstrap.config.types import (
    Condition,
    ConditionKind,
    ConfigError,
    TaskKind,
    UnsupportedConfigFormatError,
)


# -------------------------
# Helpers
# -------------------------


def write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, obj: object) -> Path:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


# -------------------------
# Basic file/path errors
# -------------------------


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_plan(tmp_path / "missing.yaml")


def test_path_is_dir_raises_config_error(tmp_path: Path) -> None:
    d = tmp_path / "dir"
    d.mkdir()
    with pytest.raises(ConfigError):
        load_plan(d)


def test_unsupported_extension_raises_unsupported_format(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.txt", "tasks: {}")
    with pytest.raises(UnsupportedConfigFormatError):
        load_plan(p)


# -------------------------
# Parse errors are wrapped
# -------------------------


def test_invalid_yaml_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks: [\n")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_invalid_toml_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.toml", "tasks = {")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_invalid_json_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.json", '{"tasks": ')
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# Top-level shape validation
# -------------------------


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "[]\n"),
        (".yaml", "null\n"),
        (".json", "[]"),
        (".json", "null"),
    ],
)
def test_top_level_not_mapping_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"plan{ext}", content)
    with pytest.raises(ConfigError):
        load_plan(p)


def test_missing_tasks_key_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "log_file: /tmp/x\n")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_unknown_top_level_field_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "nope: 1\ntasks:\n  a:\n    command: echo a\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "tasks: []\n"),
        (".yaml", "tasks: null\n"),
        (".json", '{"tasks": []}'),
        (".toml", 'tasks = "nope"\n'),
        (".toml", "tasks = 123\n"),
    ],
)
def test_tasks_not_mapping_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"plan{ext}", content)
    with pytest.raises(ConfigError):
        load_plan(p)


@pytest.mark.parametrize(
    "ext, content",
    [
        (".yaml", "tasks: {}\n"),
        (".json", '{"tasks": {}}'),
        (".toml", "[tasks]\n"),
    ],
)
def test_tasks_empty_raises(tmp_path: Path, ext: str, content: str) -> None:
    p = write_text(tmp_path / f"plan{ext}", content)
    with pytest.raises(ConfigError):
        load_plan(p)


def test_capture_output_must_be_boolean(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'capture_output: "yes"\ntasks:\n  a:\n    command: echo a\n',
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_top_level_defaults(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  a:\n    command: echo a\n")
    plan = load_plan(p)
    assert plan.log_file == "~/post_install_report.txt"
    assert plan.capture_output is False
    assert plan.brew == "brew"


# -------------------------
# Task name validation
# -------------------------


def test_task_name_not_string_yaml_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  1:\n    command: echo hi\n")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_task_name_empty_after_strip_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", 'tasks:\n  "   ":\n    command: echo hi\n')
    with pytest.raises(ConfigError):
        load_plan(p)


def test_duplicate_task_name_after_normalization_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n"
        "  update:\n"
        "    command: echo 1\n"
        '  " update ":\n'
        "    command: echo 2\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# Task kind selection
# -------------------------


def test_task_fields_not_mapping_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  update: []\n")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_unknown_task_field_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  update:\n    command: echo hi\n    nope: 1\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_task_without_kind_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", 'tasks:\n  update:\n    requires: ["bin:brew"]\n')
    with pytest.raises(ConfigError):
        load_plan(p)


def test_task_with_two_kinds_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  update:\n    command: brew update\n    formula: wget\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_command_empty_after_strip_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", 'tasks:\n  update:\n    command: "   "\n')
    with pytest.raises(ConfigError):
        load_plan(p)


def test_command_not_string_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  update:\n    command: 123\n")
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# Package tasks
# -------------------------


def test_single_formula_string_becomes_list(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  tools:\n    formula: wget\n")
    plan = load_plan(p)
    assert plan.tasks["tools"].kind is TaskKind.FORMULA
    assert plan.tasks["tools"].packages == ["wget"]


def test_duplicate_packages_are_ignored_and_preserve_order(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  apps:\n    cask: [vlc, " vlc ", firefox, vlc]\n',
    )
    plan = load_plan(p)
    assert plan.tasks["apps"].kind is TaskKind.CASK
    assert plan.tasks["apps"].packages == ["vlc", "firefox"]


def test_empty_package_name_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", 'tasks:\n  apps:\n    cask: ["  "]\n')
    with pytest.raises(ConfigError):
        load_plan(p)


def test_file_body_on_command_task_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  a:\n    command: echo a\n    line: b\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_env_on_package_task_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  apps:\n    cask: vlc\n    env:\n      KEY: v\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# File tasks
# -------------------------


def test_file_task_needs_exactly_one_body(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  f:\n    file: ~/x\n    line: a\n    content: b\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_file_task_without_body_raises(tmp_path: Path) -> None:
    p = write_text(tmp_path / "plan.yaml", "tasks:\n  f:\n    file: ~/x\n")
    with pytest.raises(ConfigError):
        load_plan(p)


def test_content_with_octal_mode(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  f:\n    file: ~/x.sh\n    content: "echo hi\\n"\n    mode: "0755"\n',
    )
    task = load_plan(p).tasks["f"]
    assert task.kind is TaskKind.WRITE_FILE
    assert task.content == "echo hi\n"
    assert task.mode == 0o755


def test_invalid_mode_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  f:\n    file: ~/x.sh\n    content: hi\n    mode: "rwx"\n',
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_mode_without_content_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  f:\n    file: ~/x\n    line: hi\n    mode: "0644"\n',
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_settings_values_are_stringified(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n"
        "  ghostty:\n"
        "    file: ~/ghostty/config\n"
        "    settings:\n"
        "      font-size: 13\n"
        "      window-inherit-font-size: false\n"
        "      theme: '\"Dracula\"'\n",
    )
    task = load_plan(p).tasks["ghostty"]
    assert task.kind is TaskKind.PATCH_CONFIG
    assert task.settings == {
        "font-size": "13",
        "window-inherit-font-size": "false",
        "theme": '"Dracula"',
    }


def test_settings_value_not_scalar_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  g:\n    file: ~/c\n    settings:\n      theme: [a]\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# Conditions
# -------------------------


def test_conditions_are_parsed(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n"
        "  login:\n"
        "    command: echo login\n"
        '    requires: ["cask:xbar", "bin:osascript"]\n'
        '    unless: ["file:~/done"]\n',
    )
    task = load_plan(p).tasks["login"]
    assert task.requires == [
        Condition(ConditionKind.CASK, "xbar"),
        Condition(ConditionKind.BIN, "osascript"),
    ]
    assert task.unless == [Condition(ConditionKind.FILE, "~/done")]


def test_available_conditions_are_parsed(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n"
        "  font:\n"
        "    cask: font-consolas\n"
        '    requires: ["available:cask:font-consolas", "available:bash"]\n',
    )
    task = load_plan(p).tasks["font"]
    assert task.requires == [
        Condition(ConditionKind.AVAILABLE, "cask:font-consolas"),
        Condition(ConditionKind.AVAILABLE, "bash"),
    ]


@pytest.mark.parametrize(
    "item",
    [
        '"brew"',
        '"tap:homebrew/fonts"',
        '"bin:"',
        "1",
        '"available:tap:fonts"',
        '"available:cask:"',
    ],
)
def test_invalid_condition_raises(tmp_path: Path, item: str) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        f"tasks:\n  a:\n    command: echo a\n    requires: [{item}]\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# env / working_dir validation
# -------------------------


def test_env_key_is_stripped_value_preserved(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  a:\n    command: echo a\n    env:\n      " KEY ": "  v  "\n',
    )
    plan = load_plan(p)
    assert plan.tasks["a"].env == {"KEY": "  v  "}


def test_env_value_not_string_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n  a:\n    command: echo a\n    env:\n      KEY: 1\n",
    )
    with pytest.raises(ConfigError):
        load_plan(p)


def test_working_dir_empty_string_raises(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        'tasks:\n  a:\n    command: echo a\n    working_dir: "   "\n',
    )
    with pytest.raises(ConfigError):
        load_plan(p)


# -------------------------
# Happy paths (all formats)
# -------------------------


def test_declaration_order_is_kept(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.yaml",
        "tasks:\n"
        "  zeta:\n"
        "    command: echo z\n"
        "  alpha:\n"
        "    command: echo a\n"
        "  mid:\n"
        "    formula: wget\n",
    )
    plan = load_plan(p)
    assert plan.task_names() == ["zeta", "alpha", "mid"]
    assert [t.name for t in plan] == ["zeta", "alpha", "mid"]


def test_valid_json_loads(tmp_path: Path) -> None:
    obj = {
        "log_file": "~/report.txt",
        "capture_output": True,
        "tasks": {
            "update": {"command": "brew update"},
            "apps": {"cask": ["vlc"], "requires": ["bin:brew"]},
        },
    }
    p = write_json(tmp_path / "plan.json", obj)
    plan = load_plan(p)
    assert plan.task_names() == ["update", "apps"]
    assert plan.log_file == "~/report.txt"
    assert plan.capture_output is True


def test_valid_toml_loads(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "plan.toml",
        'brew = "/opt/homebrew/bin/brew"\n'
        "\n"
        '[tasks."brew update"]\n'
        'command = "brew update"\n'
        "\n"
        "[tasks.ghostty]\n"
        'file = "~/ghostty/config"\n'
        "settings = { font-size = 13 }\n",
    )
    plan = load_plan(p)
    assert plan.task_names() == ["brew update", "ghostty"]
    assert plan.brew == "/opt/homebrew/bin/brew"
    assert plan.tasks["ghostty"].settings == {"font-size": "13"}


def test_sample_plan_loads() -> None:
    sample = Path(__file__).resolve().parent.parent / "brewstrap.yml"
    plan = load_plan(sample)
    assert plan.task_names()[0] == "Install Homebrew"
    assert plan.tasks["Patch Ghostty config"].settings["font-size"] == "13"
    assert plan.tasks["Install font-consolas"].requires == [
        Condition(ConditionKind.BIN, "brew"),
        Condition(ConditionKind.AVAILABLE, "cask:font-consolas"),
    ]
    assert plan.tasks["Append starship init to ~/.bashrc"].requires == [
        Condition(ConditionKind.FILE, "~/.bashrc")
    ]
    assert plan.task_names().index("Launch xbar") > plan.task_names().index(
        "Add xbar to Login Items"
    )
