"""
Diagnostic channel for template patching.

Failures that do not abort an export (skipped patches) and failures that
do (missing input, malformed template, write errors) are both recorded
here and mirrored to the standard logging module.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    MISSING_INPUT = "missing_input"
    MALFORMED_TEMPLATE = "malformed_template"
    TYPE_MISMATCH = "type_mismatch"
    CONVERSION_INPUT_INVALID = "conversion_input_invalid"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem."""
    kind: DiagnosticKind
    message: str


class Diagnostics:
    """Ordered collection of diagnostics raised during one export."""

    def __init__(self) -> None:
        self.entries: list[Diagnostic] = []

    def warn(
        self,
        kind: DiagnosticKind,
        message: str,
        log: Optional[logging.Logger] = None,
    ) -> Diagnostic:
        """Record a diagnostic and log it at WARNING level.

        Args:
            kind: Category of the problem.
            message: Human readable description.
            log: Logger of the reporting module (defaults to this module's).

        Returns:
            The recorded Diagnostic.
        """
        (log or logger).warning(message)
        diagnostic = Diagnostic(kind, message)
        self.entries.append(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.entries if d.kind is kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


def emit(
    diagnostics: Optional[Diagnostics],
    kind: DiagnosticKind,
    message: str,
    log: logging.Logger,
) -> None:
    """Report to a Diagnostics collection when given, else just log."""
    if diagnostics is None:
        log.warning(message)
    else:
        diagnostics.warn(kind, message, log)
