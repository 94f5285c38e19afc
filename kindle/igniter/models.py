"""Pydantic models for code-modification sessions.

An ``Igniter`` collects source edits and a queue of follow-up tasks
(code generation, setup, ...) that should run once the edits are written.
Applying the session writes changed sources and drains that queue.
"""

import difflib
from collections.abc import Callable, Iterable
from enum import Enum
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from kindle.core.config import get_settings
from kindle.core.errors import UnknownTaskError

# =============================================================================
# CONSTANTS
# =============================================================================

DELAYED = "delayed"
CODEGEN_TASK = "kindle.codegen"

SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "env",
    "build",
    "dist",
    "__pycache__",
    "site-packages",
    "node_modules",
}

# A queued task: a bare name, ``(name, args)`` or ``(name, args, "delayed")``.
TaskEntry = str | tuple[str, list[str]] | tuple[str, list[str], str]
TaskFunction = Callable[[list[str]], Any]


# =============================================================================
# ENUMS
# =============================================================================


class ApplyResult(str, Enum):
    """Outcome of applying a session."""

    CHANGES_MADE = "changes_made"
    NO_CHANGES = "no_changes"
    DRY_RUN_WITH_CHANGES = "dry_run_with_changes"
    DRY_RUN_WITH_NO_CHANGES = "dry_run_with_no_changes"
    ISSUES = "issues"


# =============================================================================
# SOURCES
# =============================================================================


class Source(BaseModel):
    """A project file tracked by a session.

    ``original`` is the content on disk when the source was loaded, or
    ``None`` for files created during the session.
    """

    path: Path = Field(..., description="Path relative to the session root")
    content: str = Field(default="", description="Current content")
    original: str | None = Field(default=None, description="Content when loaded")

    @classmethod
    def read(cls, path: str | Path, root: Path) -> "Source":
        """Load a source from disk."""
        relative = Path(path)
        text = (root / relative).read_text(encoding="utf-8")
        return cls(path=relative, content=text, original=text)

    @property
    def changed(self) -> bool:
        """Whether the content differs from what was loaded."""
        return self.content != self.original

    @property
    def is_python(self) -> bool:
        """Whether the source is a Python module."""
        return self.path.suffix == ".py"

    def update(self, content: str) -> "Source":
        """Replace the content."""
        self.content = content
        return self

    def diff(self) -> str:
        """Unified diff between the loaded and current content."""
        lines = difflib.unified_diff(
            (self.original or "").splitlines(keepends=True),
            self.content.splitlines(keepends=True),
            fromfile=f"a/{self.path.as_posix()}",
            tofile=f"b/{self.path.as_posix()}",
        )
        return "".join(lines)


# =============================================================================
# SESSION
# =============================================================================


class Igniter(BaseModel):
    """A code-modification session.

    Example:
        >>> igniter = Igniter(root=Path("."), task_registry={"kindle.setup": print})
        >>> igniter = igniter.add_task("kindle.setup", ["--quiet"])
        >>> igniter.apply(dry_run=True)
        <ApplyResult.DRY_RUN_WITH_CHANGES: 'dry_run_with_changes'>
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Path = Field(default_factory=Path.cwd, description="Project root")
    sources: dict[str, Source] = Field(
        default_factory=dict,
        description="Tracked sources keyed by their posix relative path",
    )
    tasks: list[TaskEntry] | None = Field(
        default_factory=list,
        description="Tasks queued to run after the sources are written",
    )
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    notices: list[str] = Field(default_factory=list)
    task_registry: dict[str, TaskFunction] | None = Field(
        default=None,
        description="Task implementations by name (entry points when unset)",
    )

    # -------------------------------------------------------------------------
    # Task queue
    # -------------------------------------------------------------------------

    def add_task(self, name: str, args: Iterable[str] = ()) -> "Igniter":
        """Queue a task to run after the sources are written."""
        self.tasks = [*(self.tasks or []), (name, list(args))]
        return self

    def delay_task(self, name: str, args: Iterable[str] = ()) -> "Igniter":
        """Queue a task to run after every immediate task."""
        self.tasks = [*(self.tasks or []), (name, list(args), DELAYED)]
        return self

    def add_issue(self, message: str) -> "Igniter":
        """Record a problem that prevents applying the session."""
        self.issues.append(message)
        return self

    def add_warning(self, message: str) -> "Igniter":
        self.warnings.append(message)
        return self

    def add_notice(self, message: str) -> "Igniter":
        self.notices.append(message)
        return self

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def include_existing_file(self, path: str | Path) -> "Igniter":
        """Track a file that exists on disk, if not already tracked."""
        key = Path(path).as_posix()
        if key not in self.sources:
            if not (self.root / key).is_file():
                return self.add_issue(f"Required {key} but it did not exist")
            self.sources[key] = Source.read(key, self.root)
        return self

    def create_new_file(self, path: str | Path, content: str) -> "Igniter":
        """Track a new file with the given content."""
        key = Path(path).as_posix()
        if key in self.sources or (self.root / key).exists():
            return self.add_issue(f"Could not create {key}: file already exists")
        self.sources[key] = Source(path=Path(key), content=content)
        return self

    def update_file(self, path: str | Path, updater: Callable[[str], str]) -> "Igniter":
        """Rewrite a tracked (or existing) file through ``updater``."""
        key = Path(path).as_posix()
        self.include_existing_file(key)
        source = self.sources.get(key)
        if source is not None:
            source.update(updater(source.content))
        return self

    def include_all_sources(self) -> "Igniter":
        """Track every project file matching the configured globs."""
        settings = get_settings()
        for pattern in settings.kindle_source_globs:
            for path in sorted(self.root.glob(pattern)):
                relative = path.relative_to(self.root)
                if not path.is_file() or any(part in SKIP_DIRS for part in relative.parts):
                    continue
                key = relative.as_posix()
                if key not in self.sources:
                    self.sources[key] = Source.read(relative, self.root)

        logger.debug(f"Tracking {len(self.sources)} sources under {self.root}")
        return self

    def changed_sources(self) -> list[Source]:
        """Sources whose content differs from disk, in tracking order."""
        return [source for source in self.sources.values() if source.changed]

    # -------------------------------------------------------------------------
    # Applying
    # -------------------------------------------------------------------------

    def apply(self, dry_run: bool = False) -> ApplyResult:
        """Write changed sources and run queued tasks, or preview them.

        Args:
            dry_run: Log the diff of every changed source instead of writing.

        Returns:
            The ApplyResult describing what happened.

        Raises:
            UnknownTaskError: If a queued task has no implementation.
        """
        if self.issues:
            for issue in self.issues:
                logger.error(f"Issue: {issue}")
            return ApplyResult.ISSUES

        changed = self.changed_sources()

        if dry_run:
            for source in changed:
                logger.info(f"Proposed change to {source.path}:\n{source.diff()}")
            self._ensure_tasks_known()
            if changed or self.tasks:
                return ApplyResult.DRY_RUN_WITH_CHANGES
            return ApplyResult.DRY_RUN_WITH_NO_CHANGES

        self._ensure_tasks_known()

        for source in changed:
            target = self.root / source.path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(source.content, encoding="utf-8")
            source.original = source.content
            logger.debug(f"Wrote {source.path}")

        ran_tasks = self._run_tasks()

        if changed or ran_tasks:
            return ApplyResult.CHANGES_MADE
        return ApplyResult.NO_CHANGES

    def _ensure_tasks_known(self) -> None:
        registry = self._registry()
        for entry in self.tasks or []:
            name, _ = _task_parts(entry)
            if name not in registry:
                raise UnknownTaskError(name)

    def _run_tasks(self) -> bool:
        """Run immediate tasks, then delayed ones.

        Each task leaves the queue only once it has finished, so after a
        failure the queue holds exactly the tasks that did not complete.
        """
        registry = self._registry()
        queue = list(self.tasks or [])
        delayed = [entry for entry in queue if _is_delayed(entry)]
        ordered = [entry for entry in queue if not _is_delayed(entry)] + delayed

        for entry in ordered:
            name, args = _task_parts(entry)
            logger.info(f"Running task {name} {' '.join(args)}".rstrip())
            registry[name](args)
            self.tasks.remove(entry)

        self.tasks = []
        return bool(ordered)

    def _registry(self) -> dict[str, TaskFunction]:
        if self.task_registry is None:
            self.task_registry = load_task_registry()
        return self.task_registry


# =============================================================================
# HELPERS
# =============================================================================


def _is_delayed(entry: TaskEntry) -> bool:
    return isinstance(entry, tuple) and len(entry) == 3 and entry[2] == DELAYED


def _task_parts(entry: TaskEntry) -> tuple[str, list[str]]:
    if isinstance(entry, str):
        return entry, []
    return entry[0], list(entry[1])


def load_task_registry(group: str | None = None) -> dict[str, TaskFunction]:
    """Load task implementations from an entry point group.

    Args:
        group: Entry point group. Defaults to ``kindle_task_group``.

    Returns:
        Mapping of task name to callable.
    """
    group = group or get_settings().kindle_task_group
    registry: dict[str, TaskFunction] = {}
    for entry_point in entry_points(group=group):
        registry[entry_point.name] = entry_point.load()

    logger.debug(f"Loaded {len(registry)} tasks from {group}")
    return registry


def codegen(igniter: Igniter, name: str) -> Igniter:
    """Queue a codegen task, or extend the name of the queued one.

    A queued ``kindle.codegen`` task named ``old`` becomes ``old_and_<name>``
    so a session only ever generates once.
    A queued codegen task without a name takes ``name``.
    """
    tasks = igniter.tasks or []
    has_codegen = any(
        isinstance(task, tuple) and len(task) == 2 and task[0] == CODEGEN_TASK
        for task in tasks
    )

    if not has_codegen:
        return igniter.add_task(CODEGEN_TASK, [name])

    updated: list[TaskEntry] = []
    for task in tasks:
        match task:
            case (str() as task_name, [old_name, *rest]) if task_name == CODEGEN_TASK:
                updated.append((task_name, [f"{old_name}_and_{name}", *rest]))
            case (str() as task_name, []) if task_name == CODEGEN_TASK:
                updated.append((task_name, [name]))
            case _:
                updated.append(task)

    igniter.tasks = updated
    return igniter
