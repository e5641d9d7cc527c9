"""
Archive codec.

File-tree <-> zip transforms used by the pipelines. An APK is treated as a
plain zip archive; nothing here understands its contents.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable

EntryFilter = Callable[[PurePosixPath], bool]

# Entries that must stay uncompressed for the platform to mmap them
STORED_NAMES = frozenset({"resources.arsc"})


def is_top_level_dex(name: PurePosixPath) -> bool:
    """Entry filter selecting the dex files at the archive root."""
    return len(name.parts) == 1 and name.suffix == ".dex"


def expand(archive: Path, dest: Path, entry_filter: EntryFilter | None = None) -> list[Path]:
    """Extract an archive, optionally only the entries accepted by ``entry_filter``.

    Returns:
        Paths of the extracted files
    """
    dest.mkdir(parents=True, exist_ok=True)
    extracted = []
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            name = PurePosixPath(info.filename)
            if name.is_absolute() or ".." in name.parts:
                continue
            if entry_filter is not None and not entry_filter(name):
                continue
            extracted.append(Path(zf.extract(info, dest)))
    return extracted


def compress(tree: Path, archive: Path) -> None:
    """Build a new archive holding every file and directory under ``tree``."""
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for dirpath, dirnames, filenames in os.walk(tree):
            dirnames.sort()
            base = Path(dirpath)
            rel_dir = base.relative_to(tree)
            if rel_dir != Path("."):
                zf.write(base, rel_dir.as_posix() + "/")
            for filename in sorted(filenames):
                rel = (rel_dir / filename).as_posix()
                compress_type = zipfile.ZIP_STORED if rel in STORED_NAMES else zipfile.ZIP_DEFLATED
                zf.write(base / filename, rel, compress_type=compress_type)


def update(archive: Path, source_dir: Path, names: Iterable[str]) -> None:
    """Replace (or add) entries of ``archive`` with files from ``source_dir``.

    Entries keep their position and compression method; other entries are
    carried over unchanged.
    """
    replacements = {name: source_dir / name for name in names}
    fd, tmp_name = tempfile.mkstemp(suffix=".zip", dir=archive.parent)
    os.close(fd)
    tmp = Path(tmp_name)

    try:
        with zipfile.ZipFile(archive, "r") as src, zipfile.ZipFile(tmp, "w") as dst:
            seen = set()
            for info in src.infolist():
                replacement = replacements.get(info.filename)
                if replacement is None:
                    dst.writestr(info, src.read(info), compress_type=info.compress_type)
                    continue
                seen.add(info.filename)
                with open(replacement, "rb") as f:
                    dst.writestr(info, f.read(), compress_type=info.compress_type)
            for name, path in replacements.items():
                if name not in seen:
                    dst.write(path, name, compress_type=zipfile.ZIP_DEFLATED)
        shutil.move(tmp, archive)
    finally:
        tmp.unlink(missing_ok=True)
