"""
Vendored binaries and assets.

Text assets ship inside the package; the tool jars and the debug keystore are
looked up in the configured tools directory. Either kind is released by copying
it into a target directory under a fixed name.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from ..core.config import ToolsConfig
from ..core.exceptions import ToolNotFoundError


class Dep(ABC):
    """A file that can be released into a directory."""

    name: str

    @abstractmethod
    def release(self, directory: Path, tools: ToolsConfig) -> Path:
        """Write the file into ``directory`` and return its path."""
        ...


@dataclass(frozen=True)
class BundledAsset(Dep):
    """A text asset shipped as package data."""

    name: str
    resource: str

    def read_text(self) -> str:
        return resources.files("rla").joinpath("assets", *self.resource.split("/")).read_text(encoding="utf-8")

    def release(self, directory: Path, tools: ToolsConfig | None = None) -> Path:
        target = directory / self.name
        target.write_text(self.read_text(), encoding="utf-8")
        return target


@dataclass(frozen=True)
class ToolBinary(Dep):
    """A binary provided by the user's tool installation."""

    name: str
    config_field: str
    install_hint: str = ""

    def candidates(self, tools: ToolsConfig) -> list[Path]:
        if self.config_field == "debug_keystore":
            return tools.keystore_candidates()
        return [tools.resolve(getattr(tools, self.config_field))]

    def locate(self, tools: ToolsConfig) -> Path:
        candidates = self.candidates(tools)
        for path in candidates:
            if path.is_file():
                return path
        raise ToolNotFoundError(
            message=f"{self.name} is not available",
            tool_name=self.name,
            expected_path=", ".join(str(p) for p in candidates),
            install_hint=self.install_hint,
        )

    def release(self, directory: Path, tools: ToolsConfig) -> Path:
        target = directory / self.name
        shutil.copyfile(self.locate(tools), target)
        return target


GIT_IGNORE = BundledAsset(".gitignore", "gitignore")
FRIDA_INDEX_JS = BundledAsset("index.js", "minifrida/index.js")
FRIDA_PACKAGE = BundledAsset("package.json", "minifrida/package.json")

SMALI = ToolBinary(
    "smali.jar",
    "smali_jar",
    install_hint="download smali from https://bitbucket.org/JesusFreke/smali/downloads/ into RLA_TOOLS_DIR",
)
BAKSMALI = ToolBinary(
    "baksmali.jar",
    "baksmali_jar",
    install_hint="download baksmali from https://bitbucket.org/JesusFreke/smali/downloads/ into RLA_TOOLS_DIR",
)
APK_SIGNER = ToolBinary(
    "apksigner.jar",
    "apksigner_jar",
    install_hint="copy lib/apksigner.jar from Android SDK build-tools into RLA_TOOLS_DIR",
)
DEBUG_STORE = ToolBinary(
    "debug.keystore",
    "debug_keystore",
    install_hint="run a debug build in Android Studio once, or set RLA_DEBUG_KEYSTORE",
)

TOOL_BINARIES = (SMALI, BAKSMALI, APK_SIGNER, DEBUG_STORE)
