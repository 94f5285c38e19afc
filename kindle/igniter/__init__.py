"""
Code-modification sessions for Kindle.

- Igniter: source edits plus a queue of follow-up tasks
- Pending-task log: what did not run when applying failed
- Scanner: find class definitions matching a predicate
"""

from kindle.igniter.models import (
    ApplyResult,
    Igniter,
    Source,
    codegen,
    load_task_registry,
)
from kindle.igniter.scanner import (
    find_all_matching_modules,
    module_name_from_path,
    scan_sources,
)
from kindle.igniter.tasks import (
    format_pending_tasks,
    format_task_log,
    pending_task_entries,
    run_with_failure_report,
)

__all__ = [
    "ApplyResult",
    "Igniter",
    "Source",
    "codegen",
    "find_all_matching_modules",
    "format_pending_tasks",
    "format_task_log",
    "load_task_registry",
    "module_name_from_path",
    "pending_task_entries",
    "run_with_failure_report",
    "scan_sources",
]
