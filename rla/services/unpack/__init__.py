"""APK -> project."""

from .service import UnpackInput, UnpackResult, UnpackService

__all__ = ["UnpackInput", "UnpackResult", "UnpackService"]
