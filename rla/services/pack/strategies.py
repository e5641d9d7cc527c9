"""
Pack strategies.

Both strategies turn a directory of freshly assembled dex files into an
unsigned APK at a given output path. Which one applies is decided by the
project config written at unpack time.
"""

from __future__ import annotations

import asyncio
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from ...core.exceptions import MappingMismatchError
from ...core.logging import get_logger
from ...models.project import ProjectConfig, ProjectLayout
from ...tools import archive

logger = get_logger(__name__)


def dex_names(dex_dir: Path) -> list[str]:
    return sorted(p.name for p in dex_dir.iterdir() if p.is_file() and p.suffix == ".dex")


class PackStrategy(ABC):
    """Produces the unsigned output APK from assembled dex files."""

    name: str = ""

    @abstractmethod
    async def produce(self, layout: ProjectLayout, dex_dir: Path, output: Path) -> Path:
        """Write the output APK and return its path."""
        ...


class SpliceStrategy(PackStrategy):
    """Copy the backup APK and swap its top-level dex entries in place."""

    name = "splice"

    async def produce(self, layout: ProjectLayout, dex_dir: Path, output: Path) -> Path:
        names = dex_names(dex_dir)
        await asyncio.to_thread(shutil.copyfile, layout.bak_apk, output)
        await asyncio.to_thread(archive.update, output, dex_dir, names)
        logger.info("Spliced dex files into backup", output=str(output), dex=names)
        return output


class FullSyncStrategy(PackStrategy):
    """Copy dex files over the unpacked tree and recompress all of it."""

    name = "full"

    def check_mapping(self, layout: ProjectLayout, names: list[str]) -> None:
        for name in names:
            target = layout.unpacked / name
            if not target.is_file():
                raise MappingMismatchError(
                    message="disassembly unit has no dex in the unpacked tree",
                    unit=str(layout.unit_dir(name)),
                    expected_dex=str(target),
                )

    async def produce(self, layout: ProjectLayout, dex_dir: Path, output: Path) -> Path:
        names = dex_names(dex_dir)
        self.check_mapping(layout, names)
        for name in names:
            await asyncio.to_thread(shutil.copyfile, dex_dir / name, layout.unpacked / name)
        await asyncio.to_thread(archive.compress, layout.unpacked, output)
        logger.info("Rebuilt APK from unpacked tree", output=str(output))
        return output


def select_strategy(config: ProjectConfig) -> PackStrategy:
    return SpliceStrategy() if config.smali_only else FullSyncStrategy()
