"""
Core type definitions for rla.

Result types shared by the tool runner, the orchestrator and the pipelines.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TaskKind(str, Enum):
    """Whether a task failure aborts its pipeline."""

    REQUIRED = "required"
    OPTIONAL = "optional"


class TaskStatus(str, Enum):
    """Status of a pipeline task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CommandOutput:
    """Captured result of a successful external command."""

    command: str
    exit_code: int
    stdout: str
    stderr: str

    @property
    def combined(self) -> str:
        """stdout followed by stderr, newline separated when both are present."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


class TaskOutcome(BaseModel):
    """Result of a single orchestrated task."""

    name: str = Field(description="Task name")
    kind: TaskKind = Field(description="Required or optional")
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: float = Field(default=0.0)
    error_message: str | None = Field(default=None)

    def mark_running(self) -> None:
        self.status = TaskStatus.RUNNING
        self.started_at = datetime.now()

    def mark_completed(self) -> None:
        """Mark task as successfully completed."""
        self.status = TaskStatus.COMPLETED
        self._finish()

    def mark_failed(self, error: str) -> None:
        """Mark task as failed."""
        self.status = TaskStatus.FAILED
        self.error_message = error
        self._finish()

    def _finish(self) -> None:
        self.completed_at = datetime.now()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    @property
    def degraded(self) -> bool:
        """An optional task that failed and was ignored."""
        return self.kind == TaskKind.OPTIONAL and self.status == TaskStatus.FAILED
