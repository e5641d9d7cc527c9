"""
Decompile Service.

Converts a single smali file into a readable Java file placed next to it,
using jadx on a scratch directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ...core.exceptions import InvalidInputError, ToolFailureError
from ...core.logging import get_logger
from ...runtime import RuntimeContext

logger = get_logger(__name__)


class DecompileService:
    """Service for smali -> java conversion of one file."""

    def __init__(self, ctx: RuntimeContext) -> None:
        self.ctx = ctx
        self.toolbox = ctx.toolbox

    async def smali_to_java(self, smali_file: Path) -> Path:
        """Decompile ``smali_file`` into ``<same dir>/<stem>.java``.

        Raises:
            InvalidInputError: If the input is not an existing .smali file
            ToolFailureError: If jadx fails or does not produce the class
        """
        if not (smali_file.is_file() and smali_file.suffix == ".smali"):
            raise InvalidInputError(
                message=f"{smali_file} is not a smali file", field_name="smali_file"
            )

        dest = smali_file.with_suffix(".java")
        outdir = self.ctx.temp_path("tmp.java")
        output = await self.toolbox.jadx_decompile(smali_file, outdir)

        java_file = next((p for p in sorted(outdir.rglob(dest.name)) if p.is_file()), None)
        if java_file is None:
            raise ToolFailureError(
                message=f".java not found at {outdir}",
                command=output.command,
                exit_code=output.exit_code,
                output=output.combined,
            )

        shutil.move(java_file, dest)
        logger.info("Decompiled smali file", source=str(smali_file), java=str(dest))
        return dest
