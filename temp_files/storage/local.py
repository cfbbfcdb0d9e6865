"""ローカルファイルシステム上のストレージドライバ."""

import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, List, TYPE_CHECKING

from temp_files.storage.base import StorageBackend, StorageError

if TYPE_CHECKING:
    from temp_files.models.content import UploadedFile


class LocalStorage(StorageBackend):
    """
    ルートディレクトリ配下にファイルを保存するバックエンド.

    書き込みは同じディレクトリの一時ファイル（.part）に出力してから
    os.replace で置き換えるため、読み手が書きかけのファイルを見ることはない。
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, root: str):
        """
        Args:
            root: ディスクのルートディレクトリ（チルダ展開される）
        """
        self.root = Path(root).expanduser().resolve()

    def _full_path(self, path: str) -> Path:
        """相対パスを解決し、ルート外を指す場合はエラーにする."""
        full = (self.root / path.lstrip("/\\")).resolve()
        if full != self.root and self.root not in full.parents:
            raise StorageError(f"Path escapes the disk root: {path}")
        return full

    def exists(self, path: str) -> bool:
        return self._full_path(path).exists()

    def make_directory(self, path: str) -> None:
        try:
            self._full_path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {path}: {e}") from e

    def put(self, path: str, data: bytes) -> None:
        target = self._full_path(path)
        self._write_atomic(target, lambda f: f.write(data))

    def put_stream(self, path: str, stream: BinaryIO) -> None:
        target = self._full_path(path)
        self._write_atomic(target, lambda f: shutil.copyfileobj(stream, f, self.CHUNK_SIZE))

    def put_file_as(self, directory: str, file: "UploadedFile", name: str) -> str:
        relative = f"{directory.rstrip('/')}/{name}" if directory else name
        target = self._full_path(relative)

        if file.path is not None:
            def copy(f):
                with open(file.path, "rb") as source:
                    shutil.copyfileobj(source, f, self.CHUNK_SIZE)
        else:
            def copy(f):
                shutil.copyfileobj(file.stream, f, self.CHUNK_SIZE)

        self._write_atomic(target, copy)
        return relative

    def _write_atomic(self, target: Path, writer) -> None:
        """一時ファイルに書き込んでから目的のパスに置き換える."""
        part = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(part, "wb") as f:
                writer(f)
            os.replace(part, target)
        except (OSError, ValueError) as e:
            # ValueError: 閉じたストリームやデコードエラー（UnicodeError）
            raise StorageError(f"Failed to write {target}: {e}") from e
        finally:
            # 書きかけの一時ファイルを残さない
            if part.exists():
                part.unlink()

    def get(self, path: str) -> bytes:
        try:
            return self._full_path(path).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def delete(self, path: str) -> None:
        try:
            self._full_path(path).unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    def files(self, directory: str) -> List[str]:
        base = self._full_path(directory)
        prefix = directory.strip("/")
        try:
            names = sorted(
                entry.name for entry in base.iterdir() if entry.is_file()
            )
        except OSError as e:
            raise StorageError(f"Failed to list {directory}: {e}") from e
        return [f"{prefix}/{name}" if prefix else name for name in names]

    def last_modified(self, path: str) -> float:
        try:
            return self._full_path(path).stat().st_mtime
        except OSError as e:
            raise StorageError(f"Failed to stat {path}: {e}") from e

    def path(self, relative: str = "") -> str:
        if not relative:
            return str(self.root)
        return str(self.root / relative.lstrip("/\\"))
