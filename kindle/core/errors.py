"""Exceptions raised by Kindle."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

# =============================================================================
# EXCEPTIONS
# =============================================================================


class KindleError(Exception):
    """Base exception for Kindle errors."""

    pass


class CompileError(KindleError):
    """Byte-compiling the project reported failures."""

    def __init__(self, root: Path, failed: Sequence[str] = ()) -> None:
        self.root = root
        self.failed = list(failed)
        detail = f": {', '.join(self.failed)}" if self.failed else ""
        super().__init__(f"Compilation failed under {root}{detail}")


class DiscoveryError(KindleError):
    """An extension reference could not be resolved."""

    pass


class UnknownTaskError(KindleError):
    """A queued task names a task that no registry provides."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No task registered under the name {name!r}")


class ScanCancelledError(KindleError):
    """The module scan was cancelled before every source was parsed."""

    pass


class SetupFailedError(KindleError):
    """The setup command finished with one or more failure records."""

    def __init__(self, records: Sequence[Any]) -> None:
        self.records = list(records)
        super().__init__(
            f"kindle.setup failed with {len(self.records)} error(s). See above."
        )


# =============================================================================
# NON-ERROR SIGNALS
# =============================================================================


class Throw(BaseException):
    """Non-local exit carrying an arbitrary value.

    Derives from ``BaseException`` so ordinary ``except Exception`` blocks
    let it through. The setup runner records it as ``("throw", value)``.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(value)
