"""External tools: command runner, archive codec, vendored binaries."""

from .runner import format_command, run_command, run_passthrough
from .toolbox import Toolbox

__all__ = ["format_command", "run_command", "run_passthrough", "Toolbox"]
