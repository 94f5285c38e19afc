"""
Failure-aggregating setup runner.

Runs the project setup in two phases and reports every failure instead of
stopping at the first one:

1. Compile - byte-compile the project sources
2. Extensions - discover extensions and run each one's ``setup(argv)``

Every captured fault becomes a FailureRecord. Compile failures do not stop
discovery, and one extension failing does not stop the others.
"""

import compileall
import re
import traceback
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console

from kindle.core.config import Settings, get_settings
from kindle.core.errors import CompileError, SetupFailedError, Throw
from kindle.igniter.models import SKIP_DIRS
from kindle.setup.extensions import discover_extensions, extension_name, has_setup
from kindle.setup.locations import location_from_exception
from kindle.setup.models import (
    FailureContext,
    FailureRecord,
    Phase,
    SetupFailed,
    SetupOk,
    SetupResult,
    Signal,
    Step,
)

CompileStep = Callable[[], Any]
DiscoverStep = Callable[[list[str]], Sequence[Any]]

console = Console()
error_console = Console(stderr=True)


# =============================================================================
# COMPILE
# =============================================================================


def compile_project(root: Path | None = None, settings: Settings | None = None) -> None:
    """Byte-compile every Python source under ``root``.

    Raises:
        CompileError: If any source fails to compile.
    """
    settings = settings or get_settings()
    root = (root or Path.cwd()).resolve()
    skip = re.compile(r"[\\/](" + "|".join(re.escape(d) for d in sorted(SKIP_DIRS)) + r")[\\/]")

    logger.info(f"Compiling {root}")
    ok = compileall.compile_dir(
        str(root),
        quiet=1,
        rx=skip,
        workers=settings.kindle_compile_workers,
    )
    if not ok:
        raise CompileError(root)


# =============================================================================
# CAPTURE
# =============================================================================


def _capture(error: BaseException) -> BaseException | Signal:
    match error:
        case Exception():
            return error
        case Throw():
            return Signal("throw", error.value)
        case SystemExit():
            return Signal("exit", error.code)
        case _:
            return Signal("exit", error)


def _record(error: BaseException, context: FailureContext) -> FailureRecord:
    record = FailureRecord(
        error=_capture(error),
        context=context,
        location=location_from_exception(error),
    )
    logger.debug(f"Captured failure in {context.step.value}: {record.error!r}")
    return record


# =============================================================================
# PHASES
# =============================================================================


def _run_compile(argv: list[str], compile_step: CompileStep) -> list[FailureRecord]:
    try:
        compile_step()
        return []
    except KeyboardInterrupt:
        raise
    except BaseException as e:
        return [_record(e, FailureContext(step=Step.COMPILE, argv=argv))]


def _run_extensions(
    argv: list[str],
    discover: DiscoverStep,
    out: Console,
) -> list[FailureRecord]:
    try:
        extensions = list(discover(argv))
    except KeyboardInterrupt:
        raise
    except BaseException as e:
        return [_record(e, FailureContext(step=Step.DISCOVER_EXTENSIONS, argv=argv))]

    failures: list[FailureRecord] = []
    for extension in extensions:
        failures.extend(_run_extension_setup(extension, argv, out))
    return failures


def _run_extension_setup(extension: Any, argv: list[str], out: Console) -> list[FailureRecord]:
    """Run one extension's setup; each sub-step tags its own failures."""
    phase = Phase.UNKNOWN
    try:
        phase = Phase.CHECK_SETUP_CAPABILITY
        if not has_setup(extension):
            return []

        phase = Phase.GET_NAME
        name = extension_name(extension)

        phase = Phase.REPORT_START
        out.print(f"Running setup for {name}...", markup=False, highlight=False, soft_wrap=True)

        phase = Phase.SETUP
        extension.setup(list(argv))
        return []
    except KeyboardInterrupt:
        raise
    except BaseException as e:
        context = FailureContext(step=Step.SETUP, argv=argv, extension=extension, phase=phase)
        return [_record(e, context)]


# =============================================================================
# ENTRY POINTS
# =============================================================================


def run_with_failure_record(
    argv: Sequence[str],
    *,
    root: Path | None = None,
    compile_step: CompileStep | None = None,
    discover: DiscoverStep | None = None,
    out: Console | None = None,
) -> SetupResult:
    """
    Run setup and return either SetupOk or SetupFailed with every record.

    Use this when you need programmatic access to failure details (error,
    context, location). Ordinary failures never raise.

    Args:
        argv: Arguments of the setup run; passed to every extension.
        root: Project root to compile. Defaults to the working directory.
        compile_step: Replaces the compile phase.
        discover: Replaces extension discovery.
        out: Console for progress lines.

    Returns:
        SetupOk, or SetupFailed with records in the order they happened.

    Example:
        >>> result = run_with_failure_record(["--extensions", "app.audit:Audit"])
        >>> if not result:
        ...     for record in result.records:
        ...         print(record.context.step, record.location)
    """
    argv = list(argv)
    compile_step = compile_step or (lambda: compile_project(root))
    discover = discover or discover_extensions
    out = out if out is not None else console

    failures = _run_compile(argv, compile_step) + _run_extensions(argv, discover, out)

    if not failures:
        return SetupOk()

    logger.info(f"Setup finished with {len(failures)} failure(s)")
    return SetupFailed(records=failures)


def run(argv: Sequence[str], **kwargs: Any) -> None:
    """Run setup, printing every failure and raising if any occurred.

    Raises:
        SetupFailedError: If any failure record was captured.
    """
    result = run_with_failure_record(argv, **kwargs)

    if isinstance(result, SetupFailed):
        for record in result.records:
            print_failure_record(record)
        raise SetupFailedError(result.records)


# =============================================================================
# REPORTING
# =============================================================================


def format_error(error: Any) -> str:
    """Human-readable rendering of a captured error."""
    match error:
        case BaseException():
            return "".join(traceback.format_exception(error)).rstrip()
        case Signal():
            return str(error)
        case _:
            return repr(error)


def print_failure_record(record: FailureRecord, out: Console | None = None) -> None:
    """Print one failure block to stderr."""
    out = out if out is not None else error_console
    out.print(f"[kindle.setup] {record.location}", markup=False, highlight=False, soft_wrap=True)
    out.print(f"  context: {record.context.to_dict()}", markup=False, highlight=False, soft_wrap=True)
    out.print(f"  error: {format_error(record.error)}", markup=False, highlight=False, soft_wrap=True)
