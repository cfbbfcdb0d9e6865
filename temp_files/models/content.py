"""保存対象コンテンツの表現."""

from pathlib import Path
from typing import BinaryIO, Optional, Union

from temp_files.storage.base import StorageBackend


class UploadedFile:
    """
    クライアントからアップロードされたファイルのハンドル.

    実体はローカルのファイルパス（path）または読み込み可能なバイナリストリーム
    （stream）のどちらか一方で指定する。
    """

    def __init__(
        self,
        original_name: str,
        path: Optional[Union[str, Path]] = None,
        stream: Optional[BinaryIO] = None,
    ):
        """
        Args:
            original_name: クライアントが申告した元のファイル名
            path: アップロード内容が保存されているローカルパス
            stream: アップロード内容を読み込めるバイナリストリーム

        Raises:
            ValueError: pathとstreamが両方とも未指定、または両方指定された場合
        """
        if (path is None) == (stream is None):
            raise ValueError("UploadedFile requires exactly one of path or stream")
        self.client_name = original_name
        self.path = Path(path) if path is not None else None
        self.stream = stream

    @property
    def original_name(self) -> str:
        """元のファイル名（ディレクトリ部分を除く）."""
        return self.client_name.replace("\\", "/").rsplit("/", 1)[-1]

    @property
    def original_extension(self) -> str:
        """元のファイル名の拡張子（ドットなし、ない場合は空文字）."""
        _, dot, extension = self.original_name.rpartition(".")
        return extension if dot else ""

    def __repr__(self) -> str:
        source = self.path if self.path is not None else "<stream>"
        return f"UploadedFile({self.client_name!r}, {source})"


class TempContent:
    """一時ファイルに書き込むコンテンツの基底クラス."""

    def write(self, storage: StorageBackend, directory: str, name: str) -> None:
        """コンテンツをストレージの directory/name に書き込む."""
        raise NotImplementedError


class BytesContent(TempContent):
    """メモリ上のバイト列."""

    def __init__(self, data: bytes):
        self.data = data

    def write(self, storage: StorageBackend, directory: str, name: str) -> None:
        storage.put(f"{directory}/{name}", self.data)


class StreamContent(TempContent):
    """読み込み可能なバイナリストリーム（最後まで読み込んで書き込む）."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write(self, storage: StorageBackend, directory: str, name: str) -> None:
        storage.put_stream(f"{directory}/{name}", self.stream)


class UploadedFileContent(TempContent):
    """アップロードファイル（バックエンドの取り込み処理を使う）."""

    def __init__(self, file: UploadedFile):
        self.file = file

    def write(self, storage: StorageBackend, directory: str, name: str) -> None:
        storage.put_file_as(directory, self.file, name)


ContentLike = Union[TempContent, UploadedFile, bytes, bytearray, str, BinaryIO]


def as_content(value: ContentLike) -> TempContent:
    """
    保存対象の値をTempContentに変換する.

    Args:
        value: バイト列、文字列（UTF-8で保存）、バイナリストリーム、
               UploadedFile、またはTempContent

    Returns:
        TempContent: 対応するコンテンツ

    Raises:
        TypeError: サポートされていない型の場合
    """
    if isinstance(value, TempContent):
        return value
    if isinstance(value, UploadedFile):
        return UploadedFileContent(value)
    if isinstance(value, (bytes, bytearray)):
        return BytesContent(bytes(value))
    if isinstance(value, str):
        return BytesContent(value.encode("utf-8"))
    if hasattr(value, "read"):
        return StreamContent(value)
    raise TypeError(f"Unsupported content type: {type(value).__name__}")
