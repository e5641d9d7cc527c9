"""Core infrastructure components for rla."""

from .config import Config, get_config
from .exceptions import (
    AlreadyExistsError,
    InvalidInputError,
    MappingMismatchError,
    NotAnApkError,
    PipelineError,
    ProjectNotFoundError,
    RlaError,
    ToolFailureError,
    ToolNotFoundError,
    WorkspaceError,
)
from .logging import get_logger, setup_logging
from .types import CommandOutput, TaskKind, TaskOutcome, TaskStatus

__all__ = [
    "Config",
    "get_config",
    "AlreadyExistsError",
    "InvalidInputError",
    "MappingMismatchError",
    "NotAnApkError",
    "PipelineError",
    "ProjectNotFoundError",
    "RlaError",
    "ToolFailureError",
    "ToolNotFoundError",
    "WorkspaceError",
    "get_logger",
    "setup_logging",
    "CommandOutput",
    "TaskKind",
    "TaskOutcome",
    "TaskStatus",
]
