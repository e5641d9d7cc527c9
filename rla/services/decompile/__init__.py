"""Single-file smali -> java."""

from .service import DecompileService

__all__ = ["DecompileService"]
