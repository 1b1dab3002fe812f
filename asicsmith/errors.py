# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exception hierarchy for the ASIC export pipeline.

Every error carries the pipeline stage it was raised from so the CLI can
print a single line identifying where the run stopped. None of these are
recoverable: the pipeline fails fast and never retries.
"""

from pathlib import Path

from rich.markup import escape


class ExportError(Exception):
    """Base exception for all export errors.

    Attributes:
        message: Main error message
        details: Optional list of additional detail lines
        stage: Pipeline stage the error belongs to (class attribute)
    """

    stage: str = "export"

    def __init__(self, message: str, details: list[str] | None = None):
        self.message = message
        self.details = details or []
        super().__init__(message)

    def format_for_console(self, include_details: bool = True) -> str:
        """Rich-markup rendering: one error line, then optional detail bullets."""
        lines = [f"[red]Error \\[{self.stage}]:[/red] {escape(self.message)}"]
        for detail in self.details if include_details else ():
            lines.append(f"  • {escape(detail)}")
        return "\n".join(lines)


class ParseError(ExportError):
    """Malformed or unreadable design, generator configuration or database."""

    stage = "parse"

    def __init__(self, message: str, source: str | Path | None = None,
                 details: list[str] | None = None):
        self.source = Path(source) if source is not None else None
        super().__init__(message, details)


class UnresolvedReferenceError(ExportError):
    """One or more external module references have no matching generator rule."""

    stage = "resolve"

    def __init__(self, references: list[str], details: list[str] | None = None):
        self.references = list(references)
        names = ", ".join(f"'{name}'" for name in self.references)
        super().__init__(f"No generator rule matches external module(s) {names}", details)


class GenerationError(ExportError):
    """A matched generator rule failed to produce module source."""

    stage = "concretize"

    def __init__(self, message: str, reference: str | None = None,
                 details: list[str] | None = None):
        self.reference = reference
        super().__init__(message, details)


class ExportIOError(ExportError):
    """Directory or artifact creation failed."""

    stage = "emit"

    def __init__(self, message: str, path: str | Path | None = None,
                 details: list[str] | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message, details)


class ConfigError(ExportError):
    """Invalid run configuration, detected before any side effect."""

    stage = "config"


class ExecutionError(ExportError):
    """The external backend flow could not be launched or exited non-zero."""

    stage = "flow"

    def __init__(self, message: str, exit_code: int | None = None,
                 details: list[str] | None = None):
        self.exit_code = exit_code
        super().__init__(message, details)


class SessionStateError(ExportError):
    """An export session operation was called out of order."""

    stage = "session"
