"""Test configuration for rla."""

import asyncio
import io
import zipfile
from pathlib import Path

import pytest

from rla.core.config import Config, ToolsConfig
from rla.core.exceptions import ToolFailureError
from rla.core.types import CommandOutput
from rla.runtime import RuntimeContext
from rla.tools.runner import format_command
from rla.tools.toolbox import Toolbox


class FakeToolbox(Toolbox):
    """Toolbox whose commands are simulated on the filesystem.

    The real Toolbox builds every command line; only the process execution is
    replaced. Each simulated command is recorded under a short label
    (``baksmali:classes.dex``, ``smali:classes2.dex``, ``sign``, ``jadx``,
    ``git init``, ``git add``, ``git commit``) and fails when that label is in
    ``fail_on``.
    """

    def __init__(self, ctx):
        super().__init__(ctx)
        self.calls = []
        self.fail_on = set()

    def _label(self, cmd):
        if cmd[0] == self.tools.java:
            jar = Path(cmd[2]).name
            if jar == "baksmali.jar":
                return f"baksmali:{Path(cmd[4]).name}"
            if jar == "smali.jar":
                return f"smali:{Path(cmd[4]).name}"
            return "sign"
        if cmd[0] == self.tools.jadx:
            return "jadx"
        return f"git {cmd[1]}"

    async def _run(self, cmd, cwd=None):
        cmd = [str(c) for c in cmd]
        label = self._label(cmd)
        self.calls.append(label)
        async with self.ctx.limiter:
            # Let sibling tasks interleave
            await asyncio.sleep(0)
            if label in self.fail_on:
                raise ToolFailureError(
                    message=f"{label} failed",
                    command=format_command(cmd),
                    exit_code=1,
                    output="simulated failure",
                )
            self._simulate(label, cmd, cwd)
        return CommandOutput(command=format_command(cmd), exit_code=0, stdout="", stderr="")

    def _simulate(self, label, cmd, cwd):
        if label.startswith("baksmali:"):
            outdir = Path(cmd[6])
            (outdir / "com" / "example").mkdir(parents=True)
            (outdir / "com" / "example" / "Main.smali").write_text(
                f".class public Lcom/example/Main;\n# {Path(cmd[4]).name}\n"
            )
        elif label.startswith("smali:"):
            smali_dir, dex = Path(cmd[4]), Path(cmd[6])
            dex.write_bytes(b"dex\n035\x00rebuilt:" + smali_dir.name.encode())
        elif label == "sign":
            apk = Path(cmd[-1])
            assert apk.is_file()
            Path(str(apk) + ".idsig").write_bytes(b"v4")
        elif label == "jadx":
            outdir = Path(cmd[cmd.index("-d") + 1])
            if "-e" in cmd:
                (outdir / "sources").mkdir(parents=True)
            else:
                source = Path(cmd[-1])
                pkg = outdir / "sources" / "com" / "example"
                pkg.mkdir(parents=True)
                (pkg / f"{source.stem}.java").write_text(f"public class {source.stem} {{}}\n")
        elif label == "git init":
            (Path(cwd) / ".git").mkdir()


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for tests.

    Returns:
        Path: A Path object pointing to the temporary directory.
    """
    return tmp_path


def build_apk_bytes(dex_names=("classes.dex", "classes2.dex")):
    """Create minimal APK-like zip bytes.

    The archive holds a manifest, the given top-level dex files, a stored
    resources.arsc, a resource file and a dex-named file that is not at the
    archive root.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("AndroidManifest.xml", b'<?xml version="1.0"?><manifest/>')
        for name in dex_names:
            zf.writestr(name, b"dex\n035\x00original:" + name.encode())
        zf.writestr(
            zipfile.ZipInfo("resources.arsc"), b"\x02\x00\x0c\x00arsc", compress_type=zipfile.ZIP_STORED
        )
        zf.writestr("res/layout/main.xml", b"<LinearLayout/>")
        zf.writestr("assets/nested/extra.dex", b"not a top level dex")
    return buffer.getvalue()


@pytest.fixture
def sample_apk_bytes():
    """Minimal APK-like archive with two dex files."""
    return build_apk_bytes()


@pytest.fixture
def sample_apk(temp_dir, sample_apk_bytes):
    """Create a sample APK file for testing.

    Returns:
        Path: ``<temp_dir>/work/sample.apk``; unpacking it creates ``work/sample``.
    """
    work = temp_dir / "work"
    work.mkdir()
    apk_path = work / "sample.apk"
    apk_path.write_bytes(sample_apk_bytes)
    return apk_path


@pytest.fixture
def tools_dir(temp_dir):
    """A tools directory holding placeholder jars and a keystore."""
    tools = temp_dir / "tools"
    tools.mkdir()
    for name in ("smali-2.5.2.jar", "baksmali-2.5.2.jar", "apksigner.jar", "debug.keystore"):
        (tools / name).write_bytes(b"PK placeholder " + name.encode())
    return tools


@pytest.fixture
def config(tools_dir):
    """Configuration pointing at the placeholder tools."""
    return Config(tools=ToolsConfig(tools_dir=tools_dir))


@pytest.fixture
def ctx(config):
    """Runtime context driving a FakeToolbox."""
    context = RuntimeContext(config, toolbox_factory=FakeToolbox)
    yield context
    context.close()


@pytest.fixture
def apk_factory(temp_dir):
    """Write an APK-like archive holding the given top-level dex files."""

    def make(name, dex_names=("classes.dex", "classes2.dex")):
        path = temp_dir / name
        path.write_bytes(build_apk_bytes(dex_names))
        return path

    return make
