"""文件系统工具单元测试"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mmsetup.core.exceptions import FileSystemError
from mmsetup.utils.fs import atomic_write, ensure_dir, read_text, remove_dir_if_exists


class TestEnsureDir:
    def test_creates_nested(self, tmp_path: Path) -> None:
        d = ensure_dir(tmp_path / "a" / "b")
        assert d.is_dir()

    def test_existing_is_noop(self, tmp_path: Path) -> None:
        ensure_dir(tmp_path)
        assert tmp_path.is_dir()

    def test_file_in_the_way(self, tmp_path: Path) -> None:
        blocker = tmp_path / "wheels"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(FileSystemError, match="failed to create directory") as e:
            ensure_dir(blocker)
        assert e.value.path == str(blocker)


class TestRemoveDir:
    def test_absent_returns_false(self, tmp_path: Path) -> None:
        assert remove_dir_if_exists(tmp_path / "nope") is False

    def test_removes_tree(self, tmp_path: Path) -> None:
        d = tmp_path / ".mmcv" / "sub"
        d.mkdir(parents=True)
        (d / "f.py").write_text("", encoding="utf-8")
        assert remove_dir_if_exists(tmp_path / ".mmcv") is True
        assert not (tmp_path / ".mmcv").exists()


class TestReadWrite:
    def test_read_preserves_crlf(self, tmp_path: Path) -> None:
        f = tmp_path / "setup.py"
        f.write_bytes(b"a\r\nb\r\n")
        assert read_text(f) == "a\r\nb\r\n"

    def test_read_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileSystemError, match="failed reading"):
            read_text(tmp_path / "missing.py")

    def test_read_invalid_utf8(self, tmp_path: Path) -> None:
        f = tmp_path / "bin.py"
        f.write_bytes(b"\xff\xfe\x00broken")
        with pytest.raises(FileSystemError):
            read_text(f)

    def test_atomic_write_replaces_content(self, tmp_path: Path) -> None:
        f = tmp_path / "setup.py"
        f.write_text("old\n", encoding="utf-8")
        atomic_write(f, "new\n")
        assert f.read_text(encoding="utf-8") == "new\n"
        assert [p.name for p in tmp_path.iterdir()] == ["setup.py"]

    def test_atomic_write_keeps_mode(self, tmp_path: Path) -> None:
        f = tmp_path / "run.py"
        f.write_text("#!/usr/bin/env python\n", encoding="utf-8")
        os.chmod(f, 0o755)
        atomic_write(f, "#!/usr/bin/env python3\n")
        assert f.stat().st_mode & 0o777 == 0o755

    def test_atomic_write_missing_parent(self, tmp_path: Path) -> None:
        with pytest.raises(FileSystemError, match="failed writing"):
            atomic_write(tmp_path / "no" / "such" / "file.py", "x")
