"""
Pending-task log for code-modification sessions.

When applying a session fails part way, the queued follow-up tasks may
never have run. These helpers render that queue so it can be replayed by
hand, and wrap ``Igniter.apply`` so the log is printed on failure.
"""

import sys
from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger

from kindle.igniter.models import DELAYED, ApplyResult, Igniter, TaskEntry

EMPTY_LOG = "No tasks were queued."
LOG_HEADER = "Tasks that did not run (or may not have completed):"
BULLET = "  • "
DELAYED_MARKER = ":delayed"

FailureLog = Callable[[str], Any]


def task_entries(tasks: Sequence[TaskEntry] | None) -> list[tuple[str, list[str]]]:
    """Normalise queued tasks to ``(name, args)`` pairs.

    Delayed tasks get ``":delayed"`` appended to their args. Entries of any
    other shape are kept as ``(str(entry), [])``.
    """
    entries: list[tuple[str, list[str]]] = []
    for task in tasks or []:
        match task:
            case str() as name:
                entries.append((name, []))
            case (str() as name, list() | tuple() as args):
                entries.append((name, [str(arg) for arg in args]))
            case (str() as name, list() | tuple() as args, marker) if marker == DELAYED:
                entries.append((name, [*(str(arg) for arg in args), DELAYED_MARKER]))
            case other:
                entries.append((str(other), []))
    return entries


def pending_task_entries(igniter: Igniter) -> list[tuple[str, list[str]]]:
    """Return ``(task_name, args)`` for each task queued on the session.

    Useful when the queue needs to be inspected or replayed programmatically.

    Example:
        >>> igniter = Igniter().add_task("kindle.codegen", ["users"]).delay_task("kindle.setup")
        >>> pending_task_entries(igniter)
        [('kindle.codegen', ['users']), ('kindle.setup', [':delayed'])]
    """
    return task_entries(igniter.tasks)


def format_task_log(tasks: Sequence[TaskEntry] | None) -> str:
    """Render queued tasks as a bulleted log, preserving queue order."""
    lines = [_format_entry(name, args) for name, args in task_entries(tasks)]

    if not lines:
        return EMPTY_LOG

    return "\n".join([LOG_HEADER, "", *(BULLET + line for line in lines)])


def format_pending_tasks(igniter: Igniter) -> str:
    """Return a concise log of the tasks in the session's queue.

    Use this when applying a session fails, to show which tasks were queued
    and may not have run.

    Example:
        >>> igniter = Igniter().add_task("kindle.setup").add_task("kindle.codegen", ["foo", "bar"])
        >>> print(format_pending_tasks(igniter))
        Tasks that did not run (or may not have completed):
        <BLANKLINE>
          • kindle.setup
          • kindle.codegen foo bar
    """
    return format_task_log(igniter.tasks)


def run_with_failure_report(
    igniter: Igniter,
    on_failure_log: FailureLog | None = None,
    **opts: Any,
) -> ApplyResult:
    """Apply the session, printing the pending-task log if that fails.

    Args:
        igniter: Session to apply.
        on_failure_log: Called once with the pending-task log when applying
            raises. Defaults to writing the log to stderr.
        **opts: Passed through to ``Igniter.apply``.

    Returns:
        Whatever ``Igniter.apply`` returns.

    Raises:
        Exception: The original failure, re-raised unchanged.
    """
    try:
        return igniter.apply(**opts)
    except Exception:
        logger.debug("Applying the session failed, reporting pending tasks")
        log_fn = on_failure_log or _write_stderr
        log_fn(format_pending_tasks(igniter))
        raise


def _format_entry(name: str, args: list[str]) -> str:
    if not args:
        return name
    return f"{name} {' '.join(args)}"


def _write_stderr(log: str) -> None:
    print(f"\n{log}\n", file=sys.stderr)
