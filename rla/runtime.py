"""
Per-invocation runtime context.

One RuntimeContext is created at process start and passed into every pipeline
call. It owns the scratch directory (released tool binaries and temporary dex
directories), the counter that keeps temporary names unique, the limiter on
concurrent tool processes and the toolbox used to drive the external tools.
"""

from __future__ import annotations

import asyncio
import itertools
import shutil
import tempfile
from pathlib import Path
from typing import Callable

from .core.config import Config, get_config
from .core.logging import get_logger
from .tools.toolbox import Toolbox
from .tools.vendored import Dep

logger = get_logger(__name__)


class RuntimeContext:
    """Process-wide state, constructed once and passed down explicitly."""

    def __init__(
        self,
        config: Config | None = None,
        toolbox_factory: Callable[[RuntimeContext], Toolbox] = Toolbox,
    ) -> None:
        self.config = config or get_config()
        self.limiter = asyncio.Semaphore(self.config.pipeline.max_workers)
        self._scratch_dir: Path | None = None
        self._counter = itertools.count(1)
        self._released: dict[str, Path] = {}
        self.toolbox = toolbox_factory(self)

    @property
    def scratch_dir(self) -> Path:
        """Scratch directory, created on first use."""
        if self._scratch_dir is None:
            self._scratch_dir = Path(tempfile.mkdtemp(prefix="rla-"))
            logger.debug("Created scratch directory", path=str(self._scratch_dir))
        return self._scratch_dir

    def temp_path(self, name: str) -> Path:
        """A fresh, not yet existing path inside the scratch directory."""
        return self.scratch_dir / f"{next(self._counter)}-{name}"

    def release(self, dep: Dep) -> Path:
        """Release a vendored binary into the scratch directory (once per run)."""
        released = self._released.get(dep.name)
        if released is None:
            released = dep.release(self.scratch_dir, self.config.tools)
            self._released[dep.name] = released
        return released

    def close(self) -> None:
        """Remove the scratch directory."""
        if self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir, ignore_errors=True)
            self._scratch_dir = None
            self._released.clear()

    def __enter__(self) -> RuntimeContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
