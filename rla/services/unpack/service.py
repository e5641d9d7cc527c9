"""
Unpack Service.

Turns an APK into an editable project: backup copy, config marker, smali
disassembly of every top-level dex, and optionally a jadx source tree and an
initial git commit.

Phase 1 runs prepare/extract (required) next to git init and jadx (optional);
phase 2 commits everything once phase 1 has settled.
"""

from __future__ import annotations

import asyncio
import shutil
from functools import partial
from pathlib import Path

from pydantic import BaseModel, Field

from ...core.exceptions import AlreadyExistsError, InvalidInputError, NotAnApkError, WorkspaceError
from ...core.logging import bind_context, get_logger
from ...core.types import TaskOutcome
from ...models.project import ProjectConfig, ProjectLayout
from ...orchestration.orchestrator import Orchestrator, Task, join
from ...runtime import RuntimeContext
from ...tools import archive
from ...tools.vendored import FRIDA_INDEX_JS, FRIDA_PACKAGE, GIT_IGNORE

logger = get_logger(__name__)


class UnpackInput(BaseModel):
    """Input for the unpack service."""

    apk_path: Path = Field(description="Path to the APK to unpack")
    config: ProjectConfig = Field(default_factory=ProjectConfig)


class UnpackResult(BaseModel):
    """Output from the unpack service."""

    project_root: Path
    dex_units: list[str] = Field(default_factory=list, description="Disassembly unit names")
    tasks: list[TaskOutcome] = Field(default_factory=list)

    @property
    def degraded_tasks(self) -> list[str]:
        """Optional tasks that failed and were skipped."""
        return [t.name for t in self.tasks if t.degraded]


class UnpackService:
    """Service that creates a project directory from an APK."""

    def __init__(self, ctx: RuntimeContext) -> None:
        self.ctx = ctx
        self.toolbox = ctx.toolbox

    def _validate(self, apk: Path) -> None:
        if apk.suffix.lower() != ".apk":
            raise NotAnApkError(message=f"not an .apk file: {apk}", path=str(apk))
        if not apk.is_file():
            raise InvalidInputError(message=f"APK file not found: {apk}", field_name="apk")

    def _prepare_destination(self, layout: ProjectLayout, force: bool) -> None:
        exists = layout.root.exists()
        if exists and not force:
            raise AlreadyExistsError(message="destination already exists", path=str(layout.root))
        try:
            if exists:
                logger.info("Removing existing project", path=str(layout.root))
                shutil.rmtree(layout.root)
            layout.root.mkdir()
        except OSError as e:
            raise WorkspaceError(
                message="cannot prepare the project directory",
                path=str(layout.root),
                cause=e,
            )

    async def _prepare_files(self, layout: ProjectLayout, apk: Path, config: ProjectConfig) -> None:
        await asyncio.to_thread(shutil.copyfile, apk, layout.bak_apk)
        GIT_IGNORE.release(layout.root)
        await config.save(layout.config_file)

        layout.minifrida.mkdir()
        FRIDA_INDEX_JS.release(layout.minifrida)
        FRIDA_PACKAGE.release(layout.minifrida)

    async def _disassemble(self, dex_dir: Path, layout: ProjectLayout) -> list[str]:
        """Run baksmali on every dex directly inside ``dex_dir``, all at once."""
        dexes = sorted(p for p in dex_dir.iterdir() if p.is_file() and p.suffix == ".dex")
        if not dexes:
            raise InvalidInputError(
                message="no dex found in the APK",
                context={"searched": str(dex_dir)},
            )

        layout.smalis.mkdir(exist_ok=True)
        logger.info("Disassembling dex files", count=len(dexes))
        await join([
            Task.required(f"baksmali {dex.name}", partial(self.toolbox.baksmali, dex, layout.unit_dir(dex.name)))
            for dex in dexes
        ])
        return [dex.name for dex in dexes]

    async def _extract_all(self, layout: ProjectLayout, apk: Path, units: list[str]) -> None:
        await asyncio.to_thread(archive.expand, apk, layout.unpacked)
        units.extend(await self._disassemble(layout.unpacked, layout))

    async def _extract_smali(self, layout: ProjectLayout, apk: Path, units: list[str]) -> None:
        dex_dir = self.ctx.temp_path("tmpdex")
        await asyncio.to_thread(archive.expand, apk, dex_dir, archive.is_top_level_dex)
        units.extend(await self._disassemble(dex_dir, layout))

    async def _git_commit(self, layout: ProjectLayout) -> None:
        await self.toolbox.git_add(layout.root)
        await self.toolbox.git_commit(layout.root, self.ctx.config.pipeline.commit_message)

    async def unpack(self, input_data: UnpackInput) -> UnpackResult:
        """Unpack an APK into a new project next to it.

        Args:
            input_data: APK path and the choices to persist

        Returns:
            UnpackResult with the project root and per-task outcomes

        Raises:
            NotAnApkError: If the input does not have an .apk extension
            AlreadyExistsError: If the project exists and force_override is off
            RlaError: If preparing files or extracting dex files fails
        """
        apk = input_data.apk_path
        config = input_data.config
        self._validate(apk)
        apk = apk.absolute()

        layout = ProjectLayout.for_apk(apk)
        bind_context(project=str(layout.root))
        logger.info("Unpacking APK", apk=str(apk), config=config.model_dump())
        self._prepare_destination(layout, config.force_override)

        units: list[str] = []
        extract = self._extract_smali if config.smali_only else self._extract_all
        phase_one = [
            Task.required("prepare files", partial(self._prepare_files, layout, apk, config)),
            Task.required("extract", partial(extract, layout, apk, units)),
        ]
        if config.git_enable:
            phase_one.append(Task.optional("git init", partial(self.toolbox.git_init, layout.root)))
        if config.jadx_enable:
            phase_one.append(Task.optional("jadx", partial(self.toolbox.jadx_extract, apk, layout.jadx_src)))

        phase_two = []
        if config.git_enable:
            phase_two.append(Task.optional("git commit", partial(self._git_commit, layout)))

        outcomes = await Orchestrator("unpack").run([phase_one, phase_two])
        logger.info("Unpack completed", project=str(layout.root), units=len(units))

        return UnpackResult(project_root=layout.root, dex_units=sorted(units), tasks=outcomes)
