"""
rla CLI.

Command-line interface for unpacking an APK into a project and packing it back.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from .core.config import Config, get_config
from .core.exceptions import RlaError
from .core.logging import setup_logging
from .models.project import ProjectConfig
from .runtime import RuntimeContext
from .tools.runner import run_passthrough
from .tools.vendored import APK_SIGNER, BAKSMALI, SMALI, TOOL_BINARIES, ToolBinary

T = TypeVar("T")

app = typer.Typer(
    name="rla",
    help="Reverse an APK into an editable smali project and pack it back",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

state = {"verbose": False}

PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"rla v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """rla: APK <-> editable smali project."""
    state["verbose"] = verbose


def _fail(error: RlaError) -> typer.Exit:
    err_console.print(f"[bold red]✗ {type(error).__name__}[/bold red]")
    err_console.print(str(error), style="red", markup=False, highlight=False)
    return typer.Exit(1)


def _setup() -> Config:
    try:
        config = get_config()
    except RlaError as e:
        raise _fail(e)
    if state["verbose"]:
        config.log_level = "DEBUG"
    setup_logging(config)
    return config


def _run(config: Config, step: Callable[[RuntimeContext], Awaitable[T]]) -> T:
    """Run one pipeline call inside a fresh runtime context.

    Any RlaError is reported in full and turned into exit status 1.
    """
    with RuntimeContext(config) as ctx:
        try:
            return asyncio.run(step(ctx))
        except RlaError as e:
            raise _fail(e)


@app.command()
def unpack(
    apk: Path = typer.Argument(
        ...,
        help="Path to the APK file to unpack",
    ),
    no_jadx: bool = typer.Option(False, "--no-jadx", help="Do not decompile sources with jadx"),
    no_git: bool = typer.Option(False, "--no-git", help="Do not track the project with git"),
    smali: bool = typer.Option(
        False,
        "--smali",
        help="Only disassemble the top-level dex files, do not extract the rest",
    ),
    force: bool = typer.Option(False, "--force", help="Replace the project directory if it exists"),
) -> None:
    """Unpack an APK into an editable project next to it."""
    from .orchestration.pipeline import unpack_apk

    config = _setup()
    project_config = ProjectConfig(
        smali_only=smali,
        git_enable=not no_git,
        jadx_enable=not no_jadx,
        force_override=force,
    )

    result = _run(config, lambda ctx: unpack_apk(apk, project_config, ctx))

    console.print(f"[bold green]✓ Unpacked[/bold green] {result.project_root}")
    table = Table(title="Tasks")
    table.add_column("Task", style="cyan")
    table.add_column("Kind")
    table.add_column("Status")
    table.add_column("Duration")
    for task in result.tasks:
        status = "[yellow]skipped (failed)[/yellow]" if task.degraded else f"[green]{task.status.value}[/green]"
        table.add_row(task.name, task.kind.value, status, f"{task.duration_seconds:.1f}s")
    console.print(table)
    console.print(f"Disassembly units: {', '.join(result.dex_units)}")


@app.command()
def pack(
    directory: Optional[Path] = typer.Option(
        None,
        "--dir",
        "-d",
        help="Project directory (default: nearest parent holding .rla.config.json)",
        file_okay=False,
        dir_okay=True,
    ),
) -> None:
    """Pack a project into a new signed APK under output/."""
    from .orchestration.pipeline import pack_apk

    config = _setup()
    result = _run(config, lambda ctx: pack_apk(directory, ctx))
    console.print(f"[bold green]✓ Packed[/bold green] {result.output_apk} ({result.strategy})")


@app.command()
def sign(
    file: Path = typer.Argument(..., help="APK to sign in place with the debug keystore"),
) -> None:
    """Sign an APK with the debug keystore."""
    from .orchestration.pipeline import sign_apk

    config = _setup()
    signed = _run(config, lambda ctx: sign_apk(file, ctx))
    console.print(f"[bold green]✓ Signed[/bold green] {signed}")


@app.command("smali2java")
def smali2java(
    file: Path = typer.Argument(..., help="smali file to decompile"),
) -> None:
    """Decompile a single smali file into a .java file next to it."""
    from .orchestration.pipeline import smali_to_java

    config = _setup()
    java = _run(config, lambda ctx: smali_to_java(file, ctx))
    console.print(f"[bold green]✓ Wrote[/bold green] {java}")


def _passthrough(jar: ToolBinary, args: list[str]) -> None:
    config = _setup()
    with RuntimeContext(config) as ctx:
        try:
            jarfile = ctx.release(jar)
            code = run_passthrough([config.tools.java, "-jar", str(jarfile), *args])
        except RlaError as e:
            raise _fail(e)
    raise typer.Exit(code)


@app.command("apksigner", context_settings=PASSTHROUGH)
def apksigner(ctx: typer.Context) -> None:
    """java -jar apksigner ..."""
    _passthrough(APK_SIGNER, ctx.args)


@app.command("smali", context_settings=PASSTHROUGH)
def smali_cmd(ctx: typer.Context) -> None:
    """java -jar smali ..."""
    _passthrough(SMALI, ctx.args)


@app.command("baksmali", context_settings=PASSTHROUGH)
def baksmali_cmd(ctx: typer.Context) -> None:
    """java -jar baksmali ..."""
    _passthrough(BAKSMALI, ctx.args)


def _tool_status(found: Any) -> str:
    return f"[green]{found}[/green]" if found else "[red]missing[/red]"


@app.command()
def config() -> None:
    """Show the resolved tool configuration."""
    cfg = _setup()
    tools = cfg.tools

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Max Workers", str(cfg.pipeline.max_workers))
    table.add_row("Tools Dir", str(tools.tools_dir))
    for exe in (tools.java, tools.git, tools.jadx):
        table.add_row(exe, _tool_status(shutil.which(exe)))
    for dep in TOOL_BINARIES:
        found = next((p for p in dep.candidates(tools) if p.is_file()), None)
        table.add_row(dep.name, _tool_status(found))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  RLA_LOG_LEVEL, RLA_TOOLS_DIR, RLA_MAX_WORKERS")
    console.print("  RLA_JAVA, RLA_GIT, RLA_JADX")
    console.print("  RLA_SMALI_JAR, RLA_BAKSMALI_JAR, RLA_APKSIGNER_JAR, RLA_DEBUG_KEYSTORE")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
