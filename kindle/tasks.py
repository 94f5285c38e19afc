"""Built-in tasks that a session can queue.

Registered under the ``kindle.tasks`` entry point group, so
``igniter.add_task("kindle.setup")`` runs the setup command once the
session's sources are written.
"""

from loguru import logger

from kindle.setup.extensions import discover_extensions, extension_name
from kindle.setup.runner import run


def setup_task(args: list[str]) -> None:
    """Run the setup command; raises SetupFailedError on failure."""
    run(args)


def codegen_task(args: list[str]) -> None:
    """Call ``codegen(args)`` on every extension that provides it."""
    for extension in discover_extensions(args):
        hook = getattr(extension, "codegen", None)
        if callable(hook):
            logger.info(f"Running codegen for {extension_name(extension)}")
            hook(list(args))
