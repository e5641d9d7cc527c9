"""
Project data models.

A project is a directory created by unpack and consumed by pack. Its layout is
fixed; the marker file doubles as the persisted unpack-time configuration.
"""

from __future__ import annotations

from pathlib import Path

import aiofiles
from pydantic import BaseModel, Field, ValidationError

from ..core.exceptions import InvalidInputError, ProjectNotFoundError

RLA_CONFIG = ".rla.config.json"
BAK_APK = "bak.apk"
UNPACKED = "unpacked"
SMALIS = "smalis"
JADX_SRC = "jadx-src"
OUTPUT = "output"
MINI_FRIDA = "minifrida"


class ProjectConfig(BaseModel):
    """Unpack-time choices, persisted at the project root.

    Written once by unpack and only read afterwards. ``force_override`` is
    recorded for reference and ignored by pack.
    """

    smali_only: bool = Field(default=False, description="Only disassemble the top-level dex files")
    git_enable: bool = Field(default=True, description="Track the project with git")
    jadx_enable: bool = Field(default=True, description="Decompile sources for reference")
    force_override: bool = Field(default=False, description="Replace an existing project directory")

    model_config = {"frozen": True, "extra": "forbid"}

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, text: str, source: Path | None = None) -> ProjectConfig:
        """Parse a persisted config.

        Every field must be present; the defaults only apply to configs built
        in code.

        Raises:
            InvalidInputError: If the content is not a valid, complete config
        """
        context = {"path": str(source)} if source else {}
        try:
            config = cls.model_validate_json(text)
        except ValidationError as e:
            raise InvalidInputError(
                message="project config cannot be parsed",
                field_name=RLA_CONFIG,
                context=context,
                cause=e,
            )
        missing = sorted(set(cls.model_fields) - config.model_fields_set)
        if missing:
            raise InvalidInputError(
                message=f"project config is incomplete, missing: {', '.join(missing)}",
                field_name=RLA_CONFIG,
                context=context,
            )
        return config

    async def save(self, path: Path) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(self.to_json())

    @classmethod
    async def load(cls, path: Path) -> ProjectConfig:
        """Load the config written at unpack time.

        Raises:
            InvalidInputError: If the file is missing or cannot be parsed
        """
        if not path.is_file():
            raise InvalidInputError(
                message="project config is missing",
                field_name=RLA_CONFIG,
                context={"path": str(path)},
            )
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                text = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidInputError(
                message="project config cannot be read",
                field_name=RLA_CONFIG,
                context={"path": str(path)},
                cause=e,
            )
        return cls.from_json(text, source=path)


class ProjectLayout(BaseModel):
    """Well-known paths of a project rooted at ``root``."""

    root: Path

    model_config = {"frozen": True}

    @property
    def config_file(self) -> Path:
        return self.root / RLA_CONFIG

    @property
    def bak_apk(self) -> Path:
        return self.root / BAK_APK

    @property
    def unpacked(self) -> Path:
        return self.root / UNPACKED

    @property
    def smalis(self) -> Path:
        return self.root / SMALIS

    @property
    def jadx_src(self) -> Path:
        return self.root / JADX_SRC

    @property
    def output(self) -> Path:
        return self.root / OUTPUT

    @property
    def minifrida(self) -> Path:
        return self.root / MINI_FRIDA

    def unit_dir(self, dex_name: str) -> Path:
        """Disassembly unit directory for the dex file ``dex_name``."""
        return self.smalis / dex_name

    def disassembly_units(self) -> list[Path]:
        """Existing disassembly unit directories, sorted by name."""
        if not self.smalis.is_dir():
            return []
        return sorted(p for p in self.smalis.iterdir() if p.is_dir())

    def output_artifacts(self) -> list[Path]:
        """Existing numbered artifacts in the output directory, in order."""
        if not self.output.is_dir():
            return []
        numbered = [p for p in self.output.iterdir() if p.stem.isascii() and p.stem.isdigit()]
        return sorted(numbered, key=lambda p: int(p.stem))

    @classmethod
    def for_apk(cls, apk: Path) -> ProjectLayout:
        """Layout of the project unpack creates for ``apk`` (the APK path without extension)."""
        return cls(root=apk.with_suffix(""))


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from ``start`` (default: cwd) to the first directory holding the marker.

    Raises:
        ProjectNotFoundError: If the filesystem root is reached first
    """
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        if (directory / RLA_CONFIG).exists():
            return directory
    raise ProjectNotFoundError(message="can't find project root", start=str(origin))
