"""
Exception hierarchy for rla.

All exceptions inherit from RlaError so the CLI can render any pipeline
failure the same way. Each exception carries enough context to diagnose the
failure without re-running in verbose mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RlaError(Exception):
    """Base exception for all rla errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class InvalidInputError(RlaError):
    """Raised when user input or persisted project state is unusable."""

    field_name: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Invalid input '{self.field_name}': {base}"
        return f"Invalid input: {base}"


@dataclass
class NotAnApkError(InvalidInputError):
    """Raised when the unpack input does not carry an .apk extension."""

    path: str = ""

    def __post_init__(self) -> None:
        self.field_name = "apk"


@dataclass
class AlreadyExistsError(RlaError):
    """Raised when the unpack destination exists and overriding was not requested."""

    path: str = ""

    def __str__(self) -> str:
        return f"{self.path} already exists, delete it or use --force"


@dataclass
class WorkspaceError(RlaError):
    """Raised when a project directory cannot be created or replaced."""

    path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (path: {self.path})"


@dataclass
class ToolFailureError(RlaError):
    """Raised when an external tool exits with a non-zero status."""

    command: str = ""
    exit_code: int = 0
    output: str = ""

    def __str__(self) -> str:
        msg = f"{self.message}\n  command: {self.command}\n  exit code: {self.exit_code}"
        if self.output:
            msg += f"\n  output:\n{self.output}"
        return msg


@dataclass
class ToolNotFoundError(RlaError):
    """Raised when a required external tool or vendored binary is not available."""

    tool_name: str = ""
    expected_path: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found at '{self.expected_path}'.{hint}"


@dataclass
class MappingMismatchError(RlaError):
    """Raised when a disassembly unit has no matching dex in the unpacked tree."""

    unit: str = ""
    expected_dex: str = ""

    def __str__(self) -> str:
        return (
            f"{self.message} | unit: {self.unit} | missing: {self.expected_dex}"
        )


@dataclass
class ProjectNotFoundError(RlaError):
    """Raised when no project root can be discovered."""

    start: str = ""

    def __str__(self) -> str:
        return f"{self.message} (searched upwards from {self.start})"


@dataclass
class PipelineError(RlaError):
    """Raised when a pipeline task fails with a non-domain error."""

    stage: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"Pipeline error at task '{self.stage}': {base}"
