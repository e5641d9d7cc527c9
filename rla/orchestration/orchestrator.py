"""
Task orchestration.

Tasks are coroutine factories over shared, read-only inputs. A phase launches
all of its tasks at once and waits for every one of them; phases run one after
another. Optional tasks degrade to a logged warning, while the first required
failure is re-raised once the whole phase has settled. Nothing is cancelled
mid-flight.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from ..core.exceptions import PipelineError, RlaError
from ..core.logging import get_logger
from ..core.types import TaskKind, TaskOutcome

logger = get_logger(__name__)


@dataclass(frozen=True)
class Task:
    """A named unit of concurrent work."""

    name: str
    run: Callable[[], Awaitable[Any]]
    kind: TaskKind = TaskKind.REQUIRED

    @classmethod
    def required(cls, name: str, run: Callable[[], Awaitable[Any]]) -> Task:
        return cls(name=name, run=run, kind=TaskKind.REQUIRED)

    @classmethod
    def optional(cls, name: str, run: Callable[[], Awaitable[Any]]) -> Task:
        return cls(name=name, run=run, kind=TaskKind.OPTIONAL)


async def _execute(task: Task, outcome: TaskOutcome) -> None:
    outcome.mark_running()
    logger.debug("Task started", task=task.name, kind=task.kind.value)
    try:
        await task.run()
    except Exception as e:
        outcome.mark_failed(str(e))
        raise
    outcome.mark_completed()
    logger.debug("Task completed", task=task.name, duration_s=round(outcome.duration_seconds, 3))


async def join(tasks: Sequence[Task]) -> list[TaskOutcome]:
    """Run ``tasks`` concurrently and wait for all of them.

    Returns:
        One outcome per task, in submission order

    Raises:
        RlaError: The first required failure, in submission order
    """
    outcomes = [TaskOutcome(name=t.name, kind=t.kind) for t in tasks]
    results = await asyncio.gather(
        *(_execute(t, o) for t, o in zip(tasks, outcomes)),
        return_exceptions=True,
    )

    first_failure: Exception | None = None
    failed_task: Task | None = None
    for task, result in zip(tasks, results):
        if not isinstance(result, BaseException):
            continue
        if not isinstance(result, Exception):
            raise result
        if task.kind == TaskKind.OPTIONAL:
            logger.warning("Optional task failed, continuing", task=task.name, error=str(result))
            continue
        logger.error("Required task failed", task=task.name, error=str(result))
        if first_failure is None:
            first_failure, failed_task = result, task

    if first_failure is not None and failed_task is not None:
        if isinstance(first_failure, RlaError):
            raise first_failure
        raise PipelineError(
            message=f"{type(first_failure).__name__}: {first_failure}",
            stage=failed_task.name,
            cause=first_failure,
        ) from first_failure

    return outcomes


class Orchestrator:
    """Runs phases of tasks in order, each phase gated on the previous one."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.outcomes: list[TaskOutcome] = []

    async def run(self, phases: Sequence[Sequence[Task]]) -> list[TaskOutcome]:
        for index, phase in enumerate(phases, start=1):
            if not phase:
                continue
            logger.info(
                "Running phase",
                pipeline=self.name,
                phase=index,
                tasks=[t.name for t in phase],
            )
            self.outcomes.extend(await join(phase))
        return self.outcomes
