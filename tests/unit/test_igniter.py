"""Unit tests for code-modification sessions."""

from pathlib import Path

import pytest

from kindle.core.errors import UnknownTaskError
from kindle.igniter.models import (
    CODEGEN_TASK,
    ApplyResult,
    Igniter,
    Source,
    codegen,
)

# =============================================================================
# SOURCE TESTS
# =============================================================================


class TestSource:
    """Tests for Source."""

    def test_read_is_unchanged(self, tmp_path: Path) -> None:
        """Test that a freshly read source is not changed."""
        (tmp_path / "mod.py").write_text("x = 1\n")

        source = Source.read("mod.py", tmp_path)

        assert source.content == "x = 1\n"
        assert source.changed is False
        assert source.is_python is True

    def test_update_marks_changed(self, tmp_path: Path) -> None:
        """Test that updating content marks the source as changed."""
        (tmp_path / "mod.py").write_text("x = 1\n")
        source = Source.read("mod.py", tmp_path)

        source.update("x = 2\n")

        assert source.changed is True
        assert "-x = 1" in source.diff()
        assert "+x = 2" in source.diff()

    def test_new_source_is_changed(self) -> None:
        """Test that created sources count as changed."""
        source = Source(path=Path("notes.txt"), content="hello")

        assert source.changed is True
        assert source.is_python is False


# =============================================================================
# TASK QUEUE TESTS
# =============================================================================


class TestTaskQueue:
    """Tests for queueing tasks on a session."""

    def test_add_task(self, igniter: Igniter) -> None:
        """Test that add_task appends a (name, args) pair."""
        igniter.add_task("kindle.setup")

        assert igniter.tasks == [("kindle.setup", [])]

    def test_delay_task(self, igniter: Igniter) -> None:
        """Test that delay_task appends a delayed entry."""
        igniter.delay_task("kindle.codegen", ["users"])

        assert igniter.tasks == [("kindle.codegen", ["users"], "delayed")]

    def test_add_task_to_none_queue(self, igniter: Igniter) -> None:
        """Test that a None queue starts a new one."""
        igniter.tasks = None

        igniter.add_task("a")

        assert igniter.tasks == [("a", [])]

    def test_codegen_adds_task(self, igniter: Igniter) -> None:
        """Test that codegen queues a codegen task when none exists."""
        codegen(igniter, "add_users")

        assert igniter.tasks == [(CODEGEN_TASK, ["add_users"])]

    def test_codegen_names_unnamed_task(self, igniter: Igniter) -> None:
        """Test that a queued codegen task without args gets the name."""
        igniter.add_task(CODEGEN_TASK)

        codegen(igniter, "add_users")

        assert igniter.tasks == [(CODEGEN_TASK, ["add_users"])]

    def test_codegen_extends_existing_name(self, igniter: Igniter) -> None:
        """Test that codegen renames an already queued codegen task."""
        igniter.add_task("kindle.setup")
        codegen(igniter, "add_users")
        codegen(igniter, "add_posts")

        assert igniter.tasks == [
            ("kindle.setup", []),
            (CODEGEN_TASK, ["add_users_and_add_posts"]),
        ]


# =============================================================================
# SOURCE TRACKING TESTS
# =============================================================================


class TestSourceTracking:
    """Tests for tracking project files."""

    def test_create_new_file(self, igniter: Igniter) -> None:
        """Test that a created file is tracked and changed."""
        igniter.create_new_file("app/models.py", "class User: ...\n")

        assert [s.path.as_posix() for s in igniter.changed_sources()] == ["app/models.py"]

    def test_create_existing_file_is_issue(self, igniter: Igniter) -> None:
        """Test that creating an existing file records an issue."""
        (igniter.root / "taken.py").write_text("")

        igniter.create_new_file("taken.py", "x = 1\n")

        assert len(igniter.issues) == 1
        assert "taken.py" in igniter.issues[0]

    def test_update_file(self, igniter: Igniter) -> None:
        """Test that update_file rewrites an existing file."""
        (igniter.root / "mod.py").write_text("x = 1\n")

        igniter.update_file("mod.py", lambda text: text.replace("1", "2"))

        assert igniter.sources["mod.py"].content == "x = 2\n"
        assert igniter.sources["mod.py"].changed is True

    def test_update_missing_file_is_issue(self, igniter: Igniter) -> None:
        """Test that updating a missing file records an issue."""
        igniter.update_file("missing.py", str.upper)

        assert igniter.issues == ["Required missing.py but it did not exist"]

    def test_include_all_sources_skips_ignored_dirs(
        self, sample_project: Path, igniter: Igniter
    ) -> None:
        """Test that include_all_sources loads project files only."""
        igniter.include_all_sources()

        assert set(igniter.sources) == {"app/__init__.py", "app/extensions.py"}
        assert igniter.changed_sources() == []


# =============================================================================
# APPLY TESTS
# =============================================================================


class TestApply:
    """Tests for Igniter.apply."""

    def test_no_changes(self, igniter: Igniter) -> None:
        """Test applying an empty session."""
        assert igniter.apply() == ApplyResult.NO_CHANGES

    def test_writes_changed_sources(self, igniter: Igniter) -> None:
        """Test that applying writes files and clears the changed state."""
        igniter.create_new_file("pkg/mod.py", "x = 1\n")

        result = igniter.apply()

        assert result == ApplyResult.CHANGES_MADE
        assert (igniter.root / "pkg" / "mod.py").read_text() == "x = 1\n"
        assert igniter.changed_sources() == []

    def test_dry_run_does_not_write(self, igniter: Igniter) -> None:
        """Test that a dry run leaves the disk untouched."""
        igniter.create_new_file("mod.py", "x = 1\n")

        assert igniter.apply(dry_run=True) == ApplyResult.DRY_RUN_WITH_CHANGES
        assert not (igniter.root / "mod.py").exists()

    def test_dry_run_without_changes(self, igniter: Igniter) -> None:
        """Test a dry run with nothing to do."""
        assert igniter.apply(dry_run=True) == ApplyResult.DRY_RUN_WITH_NO_CHANGES

    def test_issues_block_apply(self, igniter: Igniter) -> None:
        """Test that issues prevent writing."""
        igniter.create_new_file("mod.py", "x = 1\n").add_issue("bad things")

        assert igniter.apply() == ApplyResult.ISSUES
        assert not (igniter.root / "mod.py").exists()

    def test_runs_immediate_then_delayed_tasks(self, igniter: Igniter) -> None:
        """Test that delayed tasks run after every immediate task."""
        calls: list[tuple[str, list[str]]] = []
        igniter.task_registry = {
            name: (lambda args, name=name: calls.append((name, args)))
            for name in ("a", "b", "c")
        }
        igniter.delay_task("a", ["late"]).add_task("b").add_task("c", ["x", "y"])

        result = igniter.apply()

        assert result == ApplyResult.CHANGES_MADE
        assert calls == [("b", []), ("c", ["x", "y"]), ("a", ["late"])]
        assert igniter.tasks == []

    def test_unknown_task_raises_before_writing(self, igniter: Igniter) -> None:
        """Test that an unknown task fails before any file is written."""
        igniter.create_new_file("mod.py", "x = 1\n").add_task("nope")

        with pytest.raises(UnknownTaskError, match="nope"):
            igniter.apply()

        assert not (igniter.root / "mod.py").exists()

    def test_failed_task_stays_queued(self, igniter: Igniter) -> None:
        """Test that the queue keeps the failed task and everything after it."""

        def fail(args: list[str]) -> None:
            raise RuntimeError("task failed")

        igniter.task_registry = {"a": lambda args: None, "b": fail, "c": lambda args: None}
        igniter.add_task("a").add_task("b").add_task("c", ["z"])

        with pytest.raises(RuntimeError, match="task failed"):
            igniter.apply()

        assert igniter.tasks == [("b", []), ("c", ["z"])]
