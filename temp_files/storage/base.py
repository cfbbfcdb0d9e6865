"""ストレージバックエンドの抽象インターフェース."""

from abc import ABC, abstractmethod
from typing import BinaryIO, List, TYPE_CHECKING

if TYPE_CHECKING:
    from temp_files.models.content import UploadedFile


class StorageError(Exception):
    """ストレージ操作の失敗を表すエラー."""
    pass


class StorageBackend(ABC):
    """
    パスで指定するバイトストアの抽象基底クラス.

    パスはすべてディスクのルートからの相対パス（"/"区切り）で扱う。
    絶対パスへの変換は path() で行う。
    各操作の失敗は StorageError として通知する。
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """ファイルまたはディレクトリが存在するか確認する."""

    @abstractmethod
    def make_directory(self, path: str) -> None:
        """ディレクトリを作成する（既に存在する場合は何もしない）."""

    @abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """バイト列を書き込む."""

    @abstractmethod
    def put_stream(self, path: str, stream: BinaryIO) -> None:
        """ストリームを最後まで読み込んで書き込む."""

    @abstractmethod
    def put_file_as(self, directory: str, file: "UploadedFile", name: str) -> str:
        """
        アップロードファイルを指定名で取り込む.

        Returns:
            書き込んだファイルの相対パス
        """

    @abstractmethod
    def get(self, path: str) -> bytes:
        """ファイルの内容を読み込む."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """ファイルを削除する."""

    @abstractmethod
    def files(self, directory: str) -> List[str]:
        """ディレクトリ直下のファイルの相対パス一覧を返す."""

    @abstractmethod
    def last_modified(self, path: str) -> float:
        """最終更新日時をPOSIXタイムスタンプで返す."""

    @abstractmethod
    def path(self, relative: str = "") -> str:
        """相対パスを絶対パスに変換する."""
