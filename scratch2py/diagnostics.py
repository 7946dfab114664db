"""Diagnostic messages and errors for the blocks-to-Python transpiler.

Recoverable problems (unsupported blocks, missing inputs, unknown sensing
properties) are collected as diagnostics and compilation carries on.
Problems that make the project impossible to compile faithfully are raised
as ``TranspileError`` subclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TranspileError(Exception):
    """Base class for failures that stop compilation."""


class UnknownProcedureError(TranspileError):
    """A procedure call has no matching definition in its target."""

    def __init__(self, proccode: str, target_name: str) -> None:
        super().__init__(
            f"No definition for custom block '{proccode}' in target '{target_name}'"
        )
        self.proccode = proccode
        self.target_name = target_name


class ProjectFormatError(TranspileError):
    """The project file could not be turned into a project graph."""


class DiagnosticLevel(Enum):
    """Severity level for diagnostic messages."""
    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    level: DiagnosticLevel
    message: str
    target: str
    script: Optional[str] = None
    block_id: Optional[str] = None

    def __str__(self) -> str:
        loc = f"Target '{self.target}'"
        if self.script is not None:
            loc += f" Script '{self.script}'"
        if self.block_id:
            loc += f" Block {self.block_id}"
        return f"{self.level.value}: {self.message}: {loc}"


@dataclass
class DiagnosticContext:
    """Collects diagnostics for one compilation."""
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        level: DiagnosticLevel,
        message: str,
        target: str,
        script: Optional[str] = None,
        block_id: Optional[str] = None,
    ) -> None:
        """Add a diagnostic message."""
        self.diagnostics.append(Diagnostic(
            level=level,
            message=message,
            target=target,
            script=script,
            block_id=block_id,
        ))

    def error(self, message: str, target: str, script: Optional[str] = None, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.ERROR, message, target, script, block_id)

    def warning(self, message: str, target: str, script: Optional[str] = None, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.WARNING, message, target, script, block_id)

    def info(self, message: str, target: str, script: Optional[str] = None, block_id: Optional[str] = None) -> None:
        self.add(DiagnosticLevel.INFO, message, target, script, block_id)

    def has_errors(self) -> bool:
        """Check if any error diagnostics have been recorded."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    def has_warnings(self) -> bool:
        """Check if any warning diagnostics have been recorded."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.diagnostics)

    def get_errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR]

    def get_warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING]

    def summary(self) -> str:
        """Return a summary of diagnostics."""
        errors = len(self.get_errors())
        warnings = len(self.get_warnings())
        notes = len(self.diagnostics) - errors - warnings
        parts = []
        if errors:
            parts.append(f"{errors} error{'s' if errors != 1 else ''}")
        if warnings:
            parts.append(f"{warnings} warning{'s' if warnings != 1 else ''}")
        if notes:
            parts.append(f"{notes} note{'s' if notes != 1 else ''}")
        return ", ".join(parts) if parts else "No issues"
