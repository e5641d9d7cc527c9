"""Project -> signed APK."""

from .service import PackInput, PackResult, PackService, next_output_apk
from .strategies import FullSyncStrategy, PackStrategy, SpliceStrategy, select_strategy

__all__ = [
    "PackInput",
    "PackResult",
    "PackService",
    "next_output_apk",
    "FullSyncStrategy",
    "PackStrategy",
    "SpliceStrategy",
    "select_strategy",
]
