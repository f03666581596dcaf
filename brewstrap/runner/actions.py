from __future__ import annotations

import os
import shlex
import subprocess
from typing import Callable, Protocol, Sequence

from .types import CommandFailed


class Action(Protocol):
    """A unit of side-effecting work.

    ``execute`` returns whatever output the work produced (or ``None``) and
    raises on failure. The runner decides what to do with the output.
    """

    def execute(self) -> str | None: ...


class CommandAction:
    """Run an external command.

    A string is handed to the shell, a sequence is executed directly.
    stdout and stderr are always captured so nothing leaks to the terminal.
    """

    def __init__(
        self,
        command: str | Sequence[str],
        *,
        env: dict[str, str] | None = None,
        working_dir: str | None = None,
    ):
        self.command = command
        self.env = env or {}
        self.working_dir = working_dir

    def __repr__(self) -> str:
        return f"CommandAction({self.display()!r})"

    def display(self) -> str:
        if isinstance(self.command, str):
            return self.command
        return shlex.join(self.command)

    def execute(self) -> str | None:
        result = subprocess.run(
            self.command,
            shell=isinstance(self.command, str),
            cwd=self.working_dir or None,
            env={**os.environ, **self.env},
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )

        if result.returncode != 0:
            raise CommandFailed(self.display(), result.returncode, result.stdout or "")

        return result.stdout


class CallableAction:
    def __init__(self, func: Callable[[], str | None]):
        self.func = func

    def execute(self) -> str | None:
        return self.func()
