"""Task orchestration for rla."""

from .orchestrator import Orchestrator, Task, join

__all__ = [
    "Orchestrator",
    "Task",
    "join",
]
