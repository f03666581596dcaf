from .actions import Action, CallableAction, CommandAction
from .log import FAILURE, SUCCESS, RunLog
from .runner import TaskRunner
from .summary import format_elapsed, render_summary
from .types import (
    ActionError,
    CommandFailed,
    OutcomeKind,
    Report,
    TaskOutcome,
)

__all__ = [
    "Action",
    "ActionError",
    "CallableAction",
    "CommandAction",
    "CommandFailed",
    "FAILURE",
    "OutcomeKind",
    "Report",
    "RunLog",
    "SUCCESS",
    "TaskOutcome",
    "TaskRunner",
    "format_elapsed",
    "render_summary",
]
