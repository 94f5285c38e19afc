"""
Extension setup with failure accounting.

- Runner: compile, discover extensions, run every setup hook
- Records: uniform error/context/location for each captured failure
"""

from kindle.setup.extensions import (
    discover_extensions,
    display_identifier,
    extension_name,
    has_setup,
)
from kindle.setup.locations import location_from_exception, location_from_traceback
from kindle.setup.models import (
    FailureContext,
    FailureRecord,
    Phase,
    SetupFailed,
    SetupOk,
    Signal,
    Step,
)
from kindle.setup.runner import (
    compile_project,
    format_error,
    print_failure_record,
    run,
    run_with_failure_record,
)

__all__ = [
    "FailureContext",
    "FailureRecord",
    "Phase",
    "SetupFailed",
    "SetupOk",
    "Signal",
    "Step",
    "compile_project",
    "discover_extensions",
    "display_identifier",
    "extension_name",
    "format_error",
    "has_setup",
    "location_from_exception",
    "location_from_traceback",
    "print_failure_record",
    "run",
    "run_with_failure_record",
]
