"""Unit tests for the archive codec."""

import zipfile
from pathlib import PurePosixPath

from rla.tools import archive


class TestExpand:
    """Tests for archive extraction."""

    def test_expand_everything(self, sample_apk, temp_dir):
        dest = temp_dir / "out"
        archive.expand(sample_apk, dest)

        assert (dest / "AndroidManifest.xml").is_file()
        assert (dest / "classes2.dex").is_file()
        assert (dest / "res" / "layout" / "main.xml").is_file()

    def test_expand_top_level_dex_only(self, sample_apk, temp_dir):
        dest = temp_dir / "dex"
        extracted = archive.expand(sample_apk, dest, archive.is_top_level_dex)

        assert sorted(p.name for p in extracted) == ["classes.dex", "classes2.dex"]
        assert sorted(p.name for p in dest.iterdir()) == ["classes.dex", "classes2.dex"]

    def test_is_top_level_dex(self):
        assert archive.is_top_level_dex(PurePosixPath("classes3.dex"))
        assert not archive.is_top_level_dex(PurePosixPath("assets/nested/extra.dex"))
        assert not archive.is_top_level_dex(PurePosixPath("resources.arsc"))


class TestCompress:
    """Tests for rebuilding an archive from a tree."""

    def test_compress_tree(self, sample_apk, temp_dir):
        tree = temp_dir / "tree"
        archive.expand(sample_apk, tree)
        rebuilt = temp_dir / "rebuilt.apk"

        archive.compress(tree, rebuilt)

        with zipfile.ZipFile(rebuilt) as zf:
            names = zf.namelist()
            assert "classes.dex" in names
            assert "res/layout/main.xml" in names
            assert "res/" in names
            assert zf.getinfo("resources.arsc").compress_type == zipfile.ZIP_STORED
            assert zf.getinfo("classes.dex").compress_type == zipfile.ZIP_DEFLATED
            assert zf.read("AndroidManifest.xml") == b'<?xml version="1.0"?><manifest/>'


class TestUpdate:
    """Tests for splicing files into an existing archive."""

    def test_replaces_entries_in_place(self, sample_apk, temp_dir):
        source = temp_dir / "dex"
        source.mkdir()
        (source / "classes2.dex").write_bytes(b"new dex")
        (source / "classes3.dex").write_bytes(b"added dex")

        with zipfile.ZipFile(sample_apk) as zf:
            before = zf.namelist()

        archive.update(sample_apk, source, ["classes2.dex", "classes3.dex"])

        with zipfile.ZipFile(sample_apk) as zf:
            assert zf.namelist() == before + ["classes3.dex"]
            assert zf.read("classes2.dex") == b"new dex"
            assert zf.read("classes3.dex") == b"added dex"
            assert zf.read("classes.dex") == b"dex\n035\x00original:classes.dex"
            assert zf.getinfo("resources.arsc").compress_type == zipfile.ZIP_STORED
        assert [p.name for p in temp_dir.glob("work/*.zip")] == []
