"""
Pack Service.

Rebuilds a signed APK from a project: every disassembly unit is assembled
concurrently, the selected strategy produces the unsigned APK, and the result
is debug-signed. Each step is its own phase and only starts after the previous
one fully succeeded.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from pydantic import BaseModel, Field

from ...core.logging import bind_context, get_logger
from ...core.types import TaskOutcome
from ...models.project import ProjectConfig, ProjectLayout, find_project_root
from ...orchestration.orchestrator import Orchestrator, Task
from ...runtime import RuntimeContext
from .strategies import PackStrategy, select_strategy

logger = get_logger(__name__)


class PackInput(BaseModel):
    """Input for the pack service."""

    project_dir: Path | None = Field(
        default=None, description="Project root; discovered from the cwd when omitted"
    )


class PackResult(BaseModel):
    """Output from the pack service."""

    project_root: Path
    output_apk: Path
    strategy: str
    tasks: list[TaskOutcome] = Field(default_factory=list)


def next_output_apk(layout: ProjectLayout) -> Path:
    """Allocate the next artifact path, ``output/<max + 1>.apk``."""
    layout.output.mkdir(exist_ok=True)
    artifacts = layout.output_artifacts()
    index = int(artifacts[-1].stem) if artifacts else 0
    return layout.output / f"{index + 1}.apk"


class PackService:
    """Service that turns a project back into a signed APK."""

    def __init__(self, ctx: RuntimeContext) -> None:
        self.ctx = ctx
        self.toolbox = ctx.toolbox

    def _units(self, layout: ProjectLayout) -> list[Path]:
        units = []
        for unit in layout.disassembly_units():
            if unit.suffix != ".dex":
                logger.warning("Ignoring directory that is not a disassembly unit", path=str(unit))
                continue
            units.append(unit)
        return units

    async def pack(self, input_data: PackInput) -> PackResult:
        """Pack a project into ``output/<n>.apk``.

        Args:
            input_data: Optional explicit project directory

        Returns:
            PackResult with the signed artifact path

        Raises:
            ProjectNotFoundError: If no project root is given or discoverable
            InvalidInputError: If the project config is missing or unparsable
            ToolFailureError: If assembling or signing fails
            MappingMismatchError: If a unit has no dex in the unpacked tree
        """
        root = input_data.project_dir or find_project_root()
        layout = ProjectLayout(root=root.resolve())
        bind_context(project=str(layout.root))

        config = await ProjectConfig.load(layout.config_file)
        strategy: PackStrategy = select_strategy(config)
        logger.info("Packing project", strategy=strategy.name, config=config.model_dump())

        units = self._units(layout)
        if not units:
            logger.warning("Project has no disassembly units", smalis=str(layout.smalis))

        # Allocated before any concurrent work so numbering cannot race
        output = next_output_apk(layout)
        dex_dir = self.ctx.temp_path("tmpdex")
        dex_dir.mkdir(parents=True)

        assemble = [
            Task.required(f"smali {unit.name}", partial(self.toolbox.smali, unit, dex_dir / unit.name))
            for unit in units
        ]
        sync = [Task.required(f"sync {strategy.name}", partial(strategy.produce, layout, dex_dir, output))]
        sign = [Task.required("sign", partial(self.toolbox.sign, output))]

        outcomes = await Orchestrator("pack").run([assemble, sync, sign])
        logger.info("Pack completed", output=str(output))

        return PackResult(
            project_root=layout.root,
            output_apk=output,
            strategy=strategy.name,
            tasks=outcomes,
        )
