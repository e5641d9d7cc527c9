"""
Wrappers around the external tools driven by the pipelines.

Every method runs one tool invocation through the runner while holding the
context's process limiter, so sibling tasks never oversubscribe the machine.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from ..core.logging import get_logger
from ..core.types import CommandOutput
from .runner import run_command
from .vendored import APK_SIGNER, BAKSMALI, DEBUG_STORE, SMALI

if TYPE_CHECKING:
    from ..runtime import RuntimeContext

logger = get_logger(__name__)


class Toolbox:
    """baksmali, smali, apksigner, jadx and git, as used by the pipelines."""

    def __init__(self, ctx: RuntimeContext) -> None:
        self.ctx = ctx
        self.tools = ctx.config.tools

    async def _run(self, cmd: Sequence[str | Path], cwd: Path | None = None) -> CommandOutput:
        async with self.ctx.limiter:
            return await run_command(cmd, cwd=cwd)

    async def _run_jar(self, jar: Path, *args: str | Path) -> CommandOutput:
        return await self._run([self.tools.java, "-jar", jar, *args])

    async def baksmali(self, dex: Path, outdir: Path) -> CommandOutput:
        """Disassemble ``dex`` into the smali directory ``outdir``."""
        jar = self.ctx.release(BAKSMALI)
        return await self._run_jar(jar, "d", dex, "-o", outdir)

    async def smali(self, smali_dir: Path, dex: Path) -> CommandOutput:
        """Assemble the smali directory ``smali_dir`` into ``dex``."""
        jar = self.ctx.release(SMALI)
        return await self._run_jar(jar, "a", smali_dir, "-o", dex)

    async def sign(self, apk: Path) -> CommandOutput:
        """Sign ``apk`` in place with the debug keystore.

        apksigner also emits a v4 ``.idsig`` side-car next to the APK; it is
        only used for incremental installs and is removed.
        """
        keystore = self.ctx.release(DEBUG_STORE)
        jar = self.ctx.release(APK_SIGNER)
        output = await self._run_jar(
            jar,
            "sign",
            "--ks",
            keystore,
            "--ks-pass",
            f"pass:{self.tools.keystore_password}",
            apk,
        )
        idsig = apk.with_name(apk.name + ".idsig")
        if idsig.exists():
            idsig.unlink()
            logger.debug("Removed signature side-car", path=str(idsig))
        return output

    async def jadx_extract(self, apk: Path, outdir: Path) -> CommandOutput:
        """Decompile ``apk`` into readable sources under ``outdir``."""
        return await self._run([self.tools.jadx, "-e", apk, "-d", outdir])

    async def jadx_decompile(self, source: Path, outdir: Path) -> CommandOutput:
        """Decompile a single smali file into ``outdir``."""
        return await self._run([self.tools.jadx, "-d", outdir, source])

    async def git_init(self, workdir: Path) -> CommandOutput:
        return await self._run([self.tools.git, "init"], cwd=workdir)

    async def git_add(self, workdir: Path) -> CommandOutput:
        return await self._run([self.tools.git, "add", "."], cwd=workdir)

    async def git_commit(self, workdir: Path, message: str) -> CommandOutput:
        return await self._run([self.tools.git, "commit", "-m", message], cwd=workdir)
