"""
Configuration management for rla.

Provides type-safe configuration for the external tools and the task pipeline,
with environment variable overrides (a .env file is honoured) and defaults that
match a stock Android SDK setup.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import InvalidInputError

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


def _default_tools_dir() -> Path:
    return Path(os.environ.get("RLA_TOOLS_DIR", "~/.rla/tools")).expanduser()


class ToolsConfig(BaseModel):
    """External tools configuration.

    Jar and keystore entries are either absolute paths or file names resolved
    against ``tools_dir``.
    """

    java: str = Field(default="java", description="Java launcher used for the vendored jars")
    git: str = Field(default="git", description="git executable")
    jadx: str = Field(default="jadx", description="jadx executable")
    tools_dir: Path = Field(
        default_factory=_default_tools_dir,
        description="Directory holding the vendored jars",
    )
    smali_jar: Path = Field(default=Path("smali-2.5.2.jar"), description="smali assembler jar")
    baksmali_jar: Path = Field(default=Path("baksmali-2.5.2.jar"), description="baksmali disassembler jar")
    apksigner_jar: Path = Field(default=Path("apksigner.jar"), description="apksigner jar (build-tools 30.0.3)")
    debug_keystore: Path | None = Field(
        default=None,
        description="Debug keystore; falls back to tools_dir, then ~/.android",
    )
    keystore_password: str = Field(default="android", description="Debug keystore password")

    def resolve(self, path: Path) -> Path:
        """Resolve a tool path against ``tools_dir``."""
        path = path.expanduser()
        if path.is_absolute():
            return path
        return self.tools_dir / path

    def keystore_candidates(self) -> list[Path]:
        """Keystore locations in lookup order."""
        if self.debug_keystore is not None:
            return [self.resolve(self.debug_keystore)]
        return [
            self.tools_dir / "debug.keystore",
            Path("~/.android/debug.keystore").expanduser(),
        ]


class PipelineConfig(BaseModel):
    """Task pipeline configuration."""

    max_workers: int = Field(
        default_factory=lambda: os.cpu_count() or 4,
        ge=1,
        description="Maximum number of external tool processes running at once",
    )
    commit_message: str = Field(
        default="First init project", description="Message of the initial project commit"
    )

    model_config = {"validate_assignment": True}


class Config(BaseModel):
    """Root configuration for rla."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Logging level"
    )
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        tools = ToolsConfig(
            java=os.environ.get("RLA_JAVA", "java"),
            git=os.environ.get("RLA_GIT", "git"),
            jadx=os.environ.get("RLA_JADX", "jadx"),
            tools_dir=_default_tools_dir(),
            smali_jar=Path(os.environ.get("RLA_SMALI_JAR", "smali-2.5.2.jar")),
            baksmali_jar=Path(os.environ.get("RLA_BAKSMALI_JAR", "baksmali-2.5.2.jar")),
            apksigner_jar=Path(os.environ.get("RLA_APKSIGNER_JAR", "apksigner.jar")),
            debug_keystore=(
                Path(os.environ["RLA_DEBUG_KEYSTORE"])
                if os.environ.get("RLA_DEBUG_KEYSTORE")
                else None
            ),
            keystore_password=os.environ.get("RLA_KEYSTORE_PASSWORD", "android"),
        )
        pipeline_overrides = {}
        if os.environ.get("RLA_MAX_WORKERS"):
            pipeline_overrides["max_workers"] = os.environ["RLA_MAX_WORKERS"]

        try:
            return cls(
                log_level=os.environ.get("RLA_LOG_LEVEL", "WARNING"),  # type: ignore
                tools=tools,
                pipeline=PipelineConfig(**pipeline_overrides),
            )
        except ValidationError as e:
            raise InvalidInputError(
                message="invalid configuration in environment",
                field_name=", ".join(str(err["loc"][-1]) for err in e.errors()),
                cause=e,
            )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
