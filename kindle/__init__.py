"""
Kindle - extension setup and code-modification tooling.

Runs every extension's setup hook with full failure accounting, and keeps
track of the follow-up tasks a code-modification session has queued.
"""

__version__ = "0.1.0"
__author__ = "Kindle Team"

from kindle.igniter.models import ApplyResult, Igniter, Source
from kindle.setup.runner import run, run_with_failure_record

__all__ = [
    "ApplyResult",
    "Igniter",
    "Source",
    "__version__",
    "run",
    "run_with_failure_record",
]
