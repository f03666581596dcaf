from dataclasses import dataclass, field
from enum import Enum

DEFAULT_LOG_FILE = "~/post_install_report.txt"


class TaskKind(Enum):
    COMMAND = "command"
    FORMULA = "formula"
    CASK = "cask"
    WRITE_FILE = "write_file"
    ENSURE_LINE = "ensure_line"
    PATCH_CONFIG = "patch_config"


class ConditionKind(Enum):
    BIN = "bin"
    FORMULA = "formula"
    CASK = "cask"
    FILE = "file"
    AVAILABLE = "available"


@dataclass(frozen=True)
class Condition:
    kind: ConditionKind
    target: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.target}"


@dataclass
class TaskConfig:
    name: str
    kind: TaskKind
    command: str | None = None
    packages: list[str] = field(default_factory=list)
    path: str | None = None
    content: str | None = None
    line: str | None = None
    settings: dict[str, str] = field(default_factory=dict)
    mode: int | None = None
    requires: list[Condition] = field(default_factory=list)
    unless: list[Condition] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None


@dataclass
class PlanConfig:
    tasks: dict[str, TaskConfig]
    log_file: str = DEFAULT_LOG_FILE
    capture_output: bool = False
    brew: str = "brew"

    # Declaration order is execution order.
    def __iter__(self):
        yield from self.tasks.values()

    def __len__(self):
        return len(self.tasks)

    def has_task(self, name: str) -> bool:
        return name in self.tasks

    def get_task(self, name: str) -> TaskConfig:
        if not self.has_task(name):
            raise KeyError(name)

        return self.tasks[name]

    def task_names(self) -> list[str]:
        return list(self.tasks.keys())


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
