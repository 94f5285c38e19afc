"""
Extension discovery and capability checks.

An extension is any importable object (module, class or instance) that may
expose:

- ``name()`` returning a display name
- ``setup(argv)`` performing its project setup

Neither is required. Extensions are found through an entry point group,
the ``kindle_extensions`` setting, or ``--extensions`` on the command line.
"""

import importlib
import inspect
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from loguru import logger

from kindle.core.config import Settings, get_settings
from kindle.core.errors import DiscoveryError

EXTENSIONS_FLAG = "--extensions"


# =============================================================================
# CAPABILITIES
# =============================================================================


def _accepts(hook: Any, *args: Any) -> bool:
    if not callable(hook):
        return False
    try:
        inspect.signature(hook).bind(*args)
    except (TypeError, ValueError):
        return False
    return True


def has_setup(extension: Any) -> bool:
    """Whether the extension exposes a ``setup(argv)`` hook.

    Hooks that cannot be called with exactly one argument do not count, so
    an instance method looked up on its class is not a setup hook.
    """
    return _accepts(getattr(extension, "setup", None), [])


def has_name(extension: Any) -> bool:
    """Whether the extension exposes a ``name()`` function."""
    return _accepts(getattr(extension, "name", None))


def display_identifier(obj: Any) -> str:
    """Generic rendering of an extension for messages.

    Modules render as their dotted name, classes and functions as
    ``module.QualName``, anything else through ``repr``.
    """
    if inspect.ismodule(obj):
        return obj.__name__
    if inspect.isclass(obj) or inspect.isfunction(obj):
        return f"{obj.__module__}.{obj.__qualname__}"
    return repr(obj)


def extension_name(extension: Any) -> str:
    """Display name: ``extension.name()`` if available."""
    if has_name(extension):
        return str(extension.name())
    return display_identifier(extension)


# =============================================================================
# DISCOVERY
# =============================================================================


def resolve_reference(reference: str) -> Any:
    """Import an extension from a ``module:attr`` (or ``module``) reference.

    Raises:
        DiscoveryError: If the module or attribute cannot be loaded.
    """
    module_name, _, attr_path = reference.strip().partition(":")
    if not module_name:
        raise DiscoveryError(f"Invalid extension reference: {reference!r}")

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise DiscoveryError(f"Could not import extension module {module_name!r}: {e}") from e

    for attr in filter(None, attr_path.split(".")):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise DiscoveryError(f"Extension {reference!r} not found: {e}") from e

    return target


def extension_references(argv: Sequence[str]) -> list[str] | None:
    """Extension references given on the command line, if any.

    Accepts ``--extensions a:B,c:D`` and ``--extensions=a:B,c:D``; the flag
    may be repeated.
    """
    references: list[str] = []
    found = False
    args = list(argv)

    for i, arg in enumerate(args):
        if arg == EXTENSIONS_FLAG:
            found = True
            if i + 1 >= len(args):
                raise DiscoveryError(f"{EXTENSIONS_FLAG} requires a value")
            references.extend(args[i + 1].split(","))
        elif arg.startswith(f"{EXTENSIONS_FLAG}="):
            found = True
            references.extend(arg.split("=", 1)[1].split(","))

    if not found:
        return None
    return [ref.strip() for ref in references if ref.strip()]


def discover_extensions(
    argv: Sequence[str],
    settings: Settings | None = None,
) -> list[Any]:
    """
    Load every extension that should be set up.

    References given with ``--extensions`` replace the configured ones.
    Otherwise the entry point group is loaded, followed by the references
    in ``kindle_extensions``.

    Args:
        argv: Command line arguments of the setup run.
        settings: Optional settings override.

    Returns:
        Extensions in discovery order, without duplicates.

    Raises:
        DiscoveryError: If any extension cannot be loaded.
    """
    settings = settings or get_settings()
    extensions: list[Any] = []

    def add(extension: Any) -> None:
        if not any(extension is known for known in extensions):
            extensions.append(extension)

    explicit = extension_references(argv)

    if explicit is not None:
        logger.debug(f"Using extensions from the command line: {explicit}")
        for reference in explicit:
            add(resolve_reference(reference))
        return extensions

    group = settings.kindle_extension_group
    for entry_point in entry_points(group=group):
        try:
            add(entry_point.load())
        except Exception as e:
            raise DiscoveryError(
                f"Failed to load extension {entry_point.name!r} from {group}: {e}"
            ) from e

    for reference in settings.kindle_extensions:
        add(resolve_reference(reference))

    logger.debug(f"Discovered {len(extensions)} extensions")
    return extensions
