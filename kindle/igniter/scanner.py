"""
Predicate-based class scanner.

Parses the Python sources of a session and collects the fully-qualified
names of class definitions accepted by a caller predicate. Files are
parsed concurrently, bounded by ``kindle_scan_workers``.
"""

import ast
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

import anyio
import anyio.to_thread
from loguru import logger

from kindle.core.config import get_settings
from kindle.core.errors import ScanCancelledError
from kindle.igniter.models import Igniter, Source

# Receives the qualified class name and its ClassDef node.
ModulePredicate = Callable[[str, ast.ClassDef], bool]


# =============================================================================
# NAME RESOLUTION
# =============================================================================


def module_name_from_path(path: Path) -> str:
    """Convert a root-relative source path into a dotted module path.

    ``pkg/__init__.py`` maps to ``pkg`` and ``pkg/mod.py`` to ``pkg.mod``.
    A leading ``src`` directory is dropped.
    """
    parts = list(path.parts)
    if len(parts) > 1 and parts[0] == "src":
        parts = parts[1:]
    if parts[-1] == "__init__.py":
        parts = parts[:-1]
    else:
        parts[-1] = parts[-1].rsplit(".", 1)[0]
    return ".".join(parts)


class _ClassCollector(ast.NodeVisitor):
    """Walks a module, tracking the enclosing class names."""

    def __init__(self, module: str, predicate: ModulePredicate) -> None:
        self.module = module
        self.predicate = predicate
        self.scope: list[str] = []
        self.found: list[str] = []

    def visit_ClassDef(self, node: ast.ClassDef) -> None:  # noqa: N802
        self.scope.append(node.name)
        name = ".".join(filter(None, [self.module, *self.scope]))
        if self.predicate(name, node):
            self.found.append(name)
        self.generic_visit(node)
        self.scope.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:  # noqa: N802
        # Classes local to a function have no importable name.
        return None

    visit_AsyncFunctionDef = visit_FunctionDef  # noqa: N815


def find_modules_in_source(source: Source, predicate: ModulePredicate) -> list[str]:
    """Return the matching class names defined in one source.

    Sources that fail to parse are logged and yield no names.
    """
    try:
        tree = ast.parse(source.content, filename=str(source.path))
    except SyntaxError as e:
        logger.warning(f"Skipping {source.path}: {e}")
        return []

    collector = _ClassCollector(module_name_from_path(source.path), predicate)
    collector.visit(tree)
    return collector.found


# =============================================================================
# CONCURRENT SCAN
# =============================================================================


async def scan_sources(
    sources: Iterable[Source],
    predicate: ModulePredicate,
    max_concurrent: int | None = None,
    cancel: threading.Event | None = None,
) -> list[str]:
    """
    Scan sources concurrently for classes matching ``predicate``.

    Each Python source is parsed in a worker thread; at most
    ``max_concurrent`` files are parsed at once. Results are flattened in
    source order and de-duplicated.

    Args:
        sources: Sources to scan. Non-Python sources are ignored.
        predicate: Called with each qualified class name and node.
        max_concurrent: Worker bound. Defaults to ``kindle_scan_workers``.
        cancel: When set, files not yet started are skipped.

    Returns:
        Unique matching class names.

    Raises:
        ScanCancelledError: If ``cancel`` was set before the scan finished.
    """
    python_sources = [source for source in sources if source.is_python]
    max_concurrent = max_concurrent or get_settings().kindle_scan_workers
    semaphore = anyio.Semaphore(max_concurrent)
    results: list[list[str]] = [[] for _ in python_sources]

    logger.debug(
        f"Scanning {len(python_sources)} sources with up to {max_concurrent} workers"
    )

    async def scan_one(index: int, source: Source) -> None:
        async with semaphore:
            if cancel is not None and cancel.is_set():
                return
            results[index] = await anyio.to_thread.run_sync(
                find_modules_in_source, source, predicate
            )

    async with anyio.create_task_group() as tg:
        for index, source in enumerate(python_sources):
            tg.start_soon(scan_one, index, source)

    if cancel is not None and cancel.is_set():
        raise ScanCancelledError(f"Scan cancelled after {len(python_sources)} sources were queued")

    return list(dict.fromkeys(name for names in results for name in names))


def find_all_matching_modules(
    igniter: Igniter,
    predicate: ModulePredicate,
    scan_all: bool = False,
    cancel: threading.Event | None = None,
) -> list[str]:
    """Find classes in the session whose name and node satisfy ``predicate``.

    Args:
        igniter: Session whose sources are scanned.
        predicate: Called with each qualified class name and its ClassDef.
        scan_all: Scan every project source instead of only changed ones.
        cancel: Optional event that stops the scan early.

    Returns:
        Unique matching class names.

    Example:
        >>> def is_extension(name, node):
        ...     return any(getattr(b, "id", None) == "Extension" for b in node.bases)
        >>> find_all_matching_modules(igniter, is_extension, scan_all=True)
        ['app.extensions.Audit']
    """
    if scan_all:
        sources = list(igniter.include_all_sources().sources.values())
    else:
        sources = igniter.changed_sources()

    async def do_scan() -> list[str]:
        return await scan_sources(sources, predicate, cancel=cancel)

    return anyio.run(do_scan)
