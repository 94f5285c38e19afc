"""
Failure records produced by the setup command.

Every fault captured while setting up extensions is reduced to a
FailureRecord holding the error, where in the run it happened, and the
code location it originated from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kindle.setup.extensions import display_identifier


class Step(str, Enum):
    """Top-level stage of a setup run."""

    COMPILE = "compile"
    DISCOVER_EXTENSIONS = "discover-extensions"
    SETUP = "setup"


class Phase(str, Enum):
    """Sub-step of a single extension's setup."""

    CHECK_SETUP_CAPABILITY = "check-setup-capability"
    GET_NAME = "get-name"
    REPORT_START = "report-start"
    SETUP = "setup"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Signal:
    """A captured non-error exit: ``("exit", code)`` or ``("throw", value)``."""

    kind: str
    value: Any

    def __str__(self) -> str:
        return f"{self.kind}: {self.value!r}"


@dataclass
class FailureContext:
    """Where in the run a failure happened."""

    step: Step
    argv: list[str] = field(default_factory=list)
    extension: Any = None
    phase: Phase | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary, omitting unset keys."""
        data: dict[str, Any] = {"step": self.step.value}
        if self.extension is not None:
            data["extension"] = display_identifier(self.extension)
        if self.phase is not None:
            data["phase"] = self.phase.value
        data["argv"] = list(self.argv)
        return data


@dataclass
class FailureRecord:
    """A single captured failure.

    ``error`` is either the raised exception or a Signal.
    """

    error: BaseException | Signal
    context: FailureContext
    location: str = "unknown"

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary."""
        if isinstance(self.error, Signal):
            error = str(self.error)
        else:
            error = f"{type(self.error).__name__}: {self.error}"
        return {
            "error": error,
            "context": self.context.to_dict(),
            "location": self.location,
        }


class SetupOk:
    """Marker returned when every step succeeded."""

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "SetupOk()"


@dataclass
class SetupFailed:
    """Returned when any failure was captured; records are oldest first."""

    records: list[FailureRecord]

    def __bool__(self) -> bool:
        return False


SetupResult = SetupOk | SetupFailed
