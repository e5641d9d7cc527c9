"""Services package for rla."""

from .decompile import DecompileService
from .pack import PackService
from .unpack import UnpackService

__all__ = [
    "DecompileService",
    "PackService",
    "UnpackService",
]
