"""ファイル名ポリシー（サニタイズ・重複回避）のテスト."""

import re
from unittest.mock import Mock

import pytest

from temp_files.core.filename_policy import (
    random_filename,
    resolve_temp_path,
    sanitize_filename,
    split_name,
    unique_filename,
)
from temp_files.storage.base import StorageBackend, StorageError
from temp_files.storage.local import LocalStorage


SAFE_NAME_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')

SAMPLE_NAMES = [
    "",
    "report.pdf",
    "my report (final).pdf",
    "../../etc/passwd",
    "C:\\Users\\someone\\doc.txt",
    "__init__.py",
    ".env",
    "...",
    "name.",
    "a...b.txt",
    "résumé.docx",
    "archive.tar.gz",
    "file.t x",
    "a.b-c.",
    "x.ab-",
    "---",
    "日本語ファイル.xlsx",
    "a.$$",
    " spaced name .txt",
]


class TestSplitName:
    """split_nameのテストクラス."""

    def test_split_with_extension(self):
        assert split_name("report.pdf") == ("report", "pdf")

    def test_split_uses_last_dot(self):
        assert split_name("archive.tar.gz") == ("archive.tar", "gz")

    def test_split_without_extension(self):
        assert split_name("README") == ("README", "")

    def test_split_drops_directories(self):
        assert split_name("/var/data/file.csv") == ("file", "csv")
        assert split_name("C:\\data\\file.csv") == ("file", "csv")

    def test_split_dotfile(self):
        """先頭がドットの名前は拡張子のみとして扱うことを確認."""
        assert split_name(".env") == ("", "env")


class TestSanitizeFilename:
    """sanitize_filenameのテストクラス."""

    @pytest.mark.parametrize("name, expected", [
        ("report.pdf", "report.pdf"),
        ("my report (final).pdf", "my_report_final.pdf"),
        ("../../etc/passwd", "passwd"),
        ("__init__.py", "init.py"),
        ("", "file"),
        (".env", "file.env"),
        ("...", "file"),
        ("name.", "name"),
        ("a...b.txt", "a_b.txt"),
        ("résumé.docx", "r_sum.docx"),
        ("archive.tar.gz", "archive.tar.gz"),
        ("file.t x", "file.t_x"),
        ("a.$$", "a"),
    ])
    def test_sanitize_examples(self, name, expected):
        assert sanitize_filename(name) == expected

    @pytest.mark.parametrize("name", SAMPLE_NAMES)
    def test_sanitized_name_is_safe(self, name):
        """結果が空でなく、許可された文字だけで構成されることを確認."""
        result = sanitize_filename(name)
        assert result
        assert SAFE_NAME_PATTERN.match(result)
        assert result[0] not in "._-"
        assert result[-1] not in "._-"

    @pytest.mark.parametrize("name", SAMPLE_NAMES)
    def test_sanitize_is_idempotent(self, name):
        once = sanitize_filename(name)
        assert sanitize_filename(once) == once


class TestRandomFilename:
    """random_filenameのテストクラス."""

    def test_default_length_and_charset(self):
        name = random_filename()
        assert len(name) == 32
        assert re.match(r'^[A-Za-z0-9]{32}$', name)

    def test_with_extension(self):
        name = random_filename("pdf")
        assert name.endswith(".pdf")
        assert len(name) == 36

    def test_names_are_not_repeated(self):
        names = {random_filename() for _ in range(100)}
        assert len(names) == 100


class TestUniqueFilename:
    """unique_filenameのテストクラス."""

    def test_returns_desired_name_when_free(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.make_directory("temp")
        assert unique_filename(storage, "temp", "a.txt") == "a.txt"

    @pytest.mark.parametrize("existing", [1, 2, 5])
    def test_appends_next_counter(self, tmp_path, existing):
        """a.txt, a_1.txt, ... a_(N-1).txt が存在する場合に a_N.txt を返すことを確認."""
        storage = LocalStorage(str(tmp_path))
        storage.put("temp/a.txt", b"0")
        for i in range(1, existing):
            storage.put(f"temp/a_{i}.txt", b"x")

        assert unique_filename(storage, "temp", "a.txt") == f"a_{existing}.txt"

    def test_name_without_extension(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.put("temp/notes", b"x")
        assert unique_filename(storage, "temp", "notes") == "notes_1"

    def test_backend_always_reporting_existence(self):
        """常に存在すると答えるバックエンドではStorageErrorになることを確認."""
        storage = Mock(spec=StorageBackend)
        storage.exists.return_value = True

        with pytest.raises(StorageError):
            unique_filename(storage, "temp", "a.txt", max_attempts=50)

        assert storage.exists.call_count == 51


class TestResolveTempPath:
    """resolve_temp_pathのテストクラス."""

    def test_resolves_without_side_effects(self, tmp_path):
        storage = LocalStorage(str(tmp_path))

        path = resolve_temp_path(storage, "/uploads/temp/", "report.pdf", ".txt")

        assert path == str(tmp_path.resolve() / "uploads" / "temp" / "report.txt")
        assert list(tmp_path.iterdir()) == []

    def test_keeps_embedded_extension(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert resolve_temp_path(storage, "temp", "data.csv").endswith("/temp/data.csv")
