"""
Pipeline entry points for rla.

Thin functions over the services, for the CLI and for programmatic use. Each
call takes the RuntimeContext created once per process.
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import InvalidInputError
from ..models.project import ProjectConfig
from ..runtime import RuntimeContext
from ..services.decompile import DecompileService
from ..services.pack import PackInput, PackResult, PackService
from ..services.unpack import UnpackInput, UnpackResult, UnpackService


async def unpack_apk(
    apk_path: str | Path,
    config: ProjectConfig,
    ctx: RuntimeContext,
) -> UnpackResult:
    """Unpack ``apk_path`` into a project directory next to it.

    Args:
        apk_path: Path to a .apk file
        config: Unpack-time choices, persisted into the project
        ctx: Runtime context for this invocation

    Returns:
        UnpackResult with the project root and task outcomes
    """
    service = UnpackService(ctx)
    return await service.unpack(UnpackInput(apk_path=Path(apk_path), config=config))


async def pack_apk(project_dir: str | Path | None, ctx: RuntimeContext) -> PackResult:
    """Pack a project into a new signed ``output/<n>.apk``.

    Args:
        project_dir: Project root, or None to search upwards from the cwd
        ctx: Runtime context for this invocation

    Returns:
        PackResult with the artifact path
    """
    service = PackService(ctx)
    root = Path(project_dir) if project_dir is not None else None
    return await service.pack(PackInput(project_dir=root))


async def sign_apk(apk_path: str | Path, ctx: RuntimeContext) -> Path:
    """Debug-sign an APK in place."""
    apk = Path(apk_path)
    if not apk.is_file():
        raise InvalidInputError(message=f"APK file not found: {apk}", field_name="apk")
    await ctx.toolbox.sign(apk)
    return apk


async def smali_to_java(smali_file: str | Path, ctx: RuntimeContext) -> Path:
    """Decompile one smali file into a .java file next to it."""
    return await DecompileService(ctx).smali_to_java(Path(smali_file))
