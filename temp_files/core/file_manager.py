"""一時ファイルの保存・登録・クリーンアップ管理."""

import logging
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path, PurePath
from typing import Dict, Generator, List, Optional
from urllib.parse import unquote, urlparse

import httpx

from temp_files.core.filename_policy import (
    random_filename,
    resolve_temp_path,
    sanitize_filename,
    split_name,
    unique_filename,
)
from temp_files.core.sweeper import sweep_old_files
from temp_files.models.config import TempFilesConfig
from temp_files.models.content import ContentLike, UploadedFile, as_content
from temp_files.storage.base import StorageBackend, StorageError
from temp_files.storage.disks import DiskManager, StorageUnavailableError

logger = logging.getLogger(__name__)


class TempFileError(Exception):
    """一時ファイル管理のエラー基底クラス."""
    pass


class TempFileSaveError(TempFileError, IOError):
    """一時ファイルの保存失敗エラー."""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class DownloadFailedError(TempFileError):
    """URLからのダウンロード失敗エラー."""
    pass


class InvalidDownloadUrlError(DownloadFailedError):
    """不正なURLエラー."""
    pass


class DownloadTimeoutError(DownloadFailedError):
    """ダウンロードタイムアウトエラー."""
    pass


class DownloadSizeExceededError(DownloadFailedError):
    """ダウンロードサイズが制限超過エラー."""
    pass


class TempFileManager:
    """
    一時ファイルのライフサイクルを管理するクラス.

    主な責務:
    - コンテンツを一時ディレクトリに安全なファイル名で保存
    - このインスタンスが作成・登録したファイルの追跡
    - 登録済みファイルのクリーンアップ
    - 古いファイルの削除（クラッシュしたプロセスの残骸）

    スレッドセーフではない。1つのインスタンスは1つの処理単位から使うこと。
    """

    def __init__(
        self,
        directory: str = "temp",
        max_age_hours: float = 10,
        disk: str = "local",
        disks: Optional[DiskManager] = None,
        http_client: Optional[httpx.Client] = None,
        download_timeout: float = 30,
        max_download_size: int = 50 * 1024 * 1024,  # 50MB
    ):
        """
        Args:
            directory: ディスク内の一時ディレクトリ
            max_age_hours: cleanup_old_filesで削除対象とする経過時間（時間）
            disk: 使用するディスク名
            disks: ディスク名を解決するDiskManager（省略時はデフォルト設定）
            http_client: save_from_urlで使うHTTPクライアント
            download_timeout: URLダウンロードのタイムアウト秒数
            max_download_size: ダウンロード可能な最大ファイルサイズ（バイト）

        Raises:
            StorageUnavailableError: ディスクが利用できない、またはディレクトリを作成できない場合
        """
        self.directory = directory.strip("/")
        self.max_age = timedelta(hours=max_age_hours)
        self.disk = disk
        self.http_client = http_client
        self.download_timeout = download_timeout
        self.max_download_size = max_download_size
        # dictを挿入順序付きの集合として使う
        self._registered: Dict[str, None] = {}

        if disks is None:
            disks = DiskManager(TempFilesConfig().disks)
        self.storage: StorageBackend = disks.disk(disk)

        self._ensure_directory_exists()

    @classmethod
    def from_config(
        cls,
        config: TempFilesConfig,
        disks: Optional[DiskManager] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> "TempFileManager":
        """設定オブジェクトからインスタンスを生成する."""
        return cls(
            directory=config.directory,
            max_age_hours=config.max_age_hours,
            disk=config.disk,
            disks=disks or DiskManager(config.disks),
            http_client=http_client,
            download_timeout=config.download_timeout,
            max_download_size=config.max_download_size,
        )

    def _ensure_directory_exists(self) -> None:
        """一時ディレクトリが存在しなければ作成する."""
        try:
            if not self.storage.exists(self.directory):
                self.storage.make_directory(self.directory)
        except (StorageError, OSError) as e:
            raise StorageUnavailableError(
                f"Cannot create temp directory '{self.directory}' on disk [{self.disk}]: {e}"
            ) from e

    @property
    def registered_files(self) -> List[str]:
        """登録済みファイルの絶対パス一覧."""
        return list(self._registered)

    def get_temp_path(self, filename: str, extension: Optional[str] = None) -> str:
        """
        ファイル名に対応する一時ファイルの絶対パスを返す（ファイルは作成しない）.

        Args:
            filename: ファイル名
            extension: 拡張子（指定時はfilenameの拡張子より優先）

        Returns:
            一時ファイルの絶対パス
        """
        return resolve_temp_path(self.storage, self.directory, filename, extension)

    def save(
        self,
        content: ContentLike,
        filename: Optional[str] = None,
        extension: Optional[str] = None,
    ) -> str:
        """
        コンテンツを一時ファイルとして保存し、クリーンアップ対象に登録する.

        処理フロー:
        1. ファイル名未指定ならランダムな名前を生成
        2. ファイル名をサニタイズ
        3. 一時ディレクトリ内で重複しない名前に変換
        4. コンテンツの種類に応じて書き込み
        5. 絶対パスを登録して返す

        Args:
            content: バイト列、バイナリストリーム、UploadedFile、またはTempContent
            filename: 保存するファイル名
            extension: 拡張子（filenameの拡張子を置き換える）

        Returns:
            保存したファイルの絶対パス

        Raises:
            TempFileSaveError: 書き込みに失敗した場合（何も登録されない）
            TypeError: contentの型がサポートされていない場合
        """
        payload = as_content(content)

        if extension is not None:
            extension = extension.lstrip(".")

        if not filename:
            filename = random_filename(extension)
        elif extension:
            filename = f"{split_name(filename)[0]}.{extension}"

        try:
            safe_filename = sanitize_filename(filename)
            unique = unique_filename(self.storage, self.directory, safe_filename)
            payload.write(self.storage, self.directory, unique)
        except (StorageError, OSError) as e:
            logger.error(f"Error saving temporary file {filename!r}: {e}")
            raise TempFileSaveError(
                f"Failed to save temporary file '{filename}': {e}", filename=filename
            ) from e

        full_path = self.get_temp_path(unique)
        self.register(full_path)
        return full_path

    def save_uploaded_file(self, file: UploadedFile, filename: Optional[str] = None) -> str:
        """
        アップロードファイルを一時ファイルとして保存する.

        Args:
            file: アップロードファイル
            filename: 保存するファイル名（省略時はアップロード時の元の名前）

        Returns:
            保存したファイルの絶対パス

        Raises:
            TempFileSaveError: 書き込みに失敗した場合
        """
        name = filename or file.original_name
        extension = None
        # 名前自体に拡張子がなければアップロード元の拡張子を使う
        if not split_name(name)[1] and file.original_extension:
            extension = file.original_extension
        return self.save(file, name, extension)

    def save_from_url(self, url: str, filename: Optional[str] = None) -> str:
        """
        URLからダウンロードした内容を一時ファイルとして保存する.

        Args:
            url: ダウンロードするURL（http/https）
            filename: 保存するファイル名（省略時はURLのパスから決定）

        Returns:
            保存したファイルの絶対パス

        Raises:
            InvalidDownloadUrlError: 不正なURL
            DownloadTimeoutError: ダウンロードタイムアウト
            DownloadSizeExceededError: ファイルサイズが制限超過
            DownloadFailedError: ダウンロード失敗（非2xx応答、通信エラー）
            TempFileSaveError: 書き込みに失敗した場合
        """
        self._validate_url(url)

        try:
            content = self._download(url)
        except DownloadFailedError as e:
            logger.error(f"Error downloading file from URL {url}: {e}")
            raise

        if not filename:
            filename = PurePath(unquote(urlparse(url).path)).name or random_filename()

        return self.save(content, filename)

    def _validate_url(self, url: str) -> None:
        """
        URLの妥当性を検証する.

        Raises:
            InvalidDownloadUrlError: 不正なURL
        """
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise InvalidDownloadUrlError(f"Invalid URL format: {url}") from e

        # スキームチェック（HTTP/HTTPSのみ許可）
        if parsed.scheme not in ("http", "https"):
            raise InvalidDownloadUrlError(
                f"Invalid URL scheme: {parsed.scheme!r}. Only http and https are supported."
            )

        if not parsed.netloc:
            raise InvalidDownloadUrlError("URL must have a valid domain")

    def _download(self, url: str) -> bytes:
        """
        URLの内容をサイズ制限付きでダウンロードする.

        Raises:
            DownloadTimeoutError: ダウンロードタイムアウト
            DownloadSizeExceededError: ファイルサイズが制限超過
            DownloadFailedError: ダウンロード失敗
        """
        client = self.http_client or httpx.Client(timeout=self.download_timeout)
        try:
            with client.stream(
                "GET", url, follow_redirects=True, timeout=self.download_timeout
            ) as response:
                response.raise_for_status()

                content_length = response.headers.get("content-length")
                if content_length and content_length.isdigit() \
                        and int(content_length) > self.max_download_size:
                    raise DownloadSizeExceededError(
                        f"File size ({int(content_length)} bytes) exceeds "
                        f"maximum allowed size ({self.max_download_size} bytes): {url}"
                    )

                # ストリーミングダウンロードでサイズを監視
                chunks = []
                downloaded_size = 0
                for chunk in response.iter_bytes(chunk_size=8192):
                    downloaded_size += len(chunk)
                    if downloaded_size > self.max_download_size:
                        raise DownloadSizeExceededError(
                            f"File size exceeds maximum allowed size "
                            f"({self.max_download_size} bytes): {url}"
                        )
                    chunks.append(chunk)
                return b"".join(chunks)

        except httpx.TimeoutException as e:
            raise DownloadTimeoutError(
                f"Download timed out after {self.download_timeout} seconds: {url}"
            ) from e
        except httpx.HTTPStatusError as e:
            raise DownloadFailedError(
                f"HTTP error {e.response.status_code} while downloading: {url}"
            ) from e
        except httpx.HTTPError as e:
            raise DownloadFailedError(f"Failed to download file from URL {url}: {e}") from e
        finally:
            # 外部から渡されたクライアントは閉じない
            if client is not self.http_client:
                client.close()

    def register(self, file_path: str) -> None:
        """
        ファイルをクリーンアップ対象として登録する.

        存在確認は行わない。同じパスを複数回登録しても1件として扱う。

        Args:
            file_path: 登録するファイルの絶対パス（空文字の場合は何もしない）

        Raises:
            ValueError: パスがディスクのルート配下にない場合
        """
        if not file_path:
            return
        file_path = str(file_path)
        # ルート配下でなければここでValueErrorになる
        self._relative_path(file_path)
        if file_path not in self._registered:
            self._registered[file_path] = None
            logger.debug(f"Registered temporary file {file_path}")

    def cleanup(self, file_path: Optional[str] = None) -> None:
        """
        登録済みの一時ファイルを削除する.

        file_path指定時はそのファイルのみ削除し、削除の成否にかかわらず登録を外す。
        未指定時は登録済みの全ファイルを削除し、登録を空にする。

        Args:
            file_path: 削除するファイルの絶対パス

        Note:
            例外は送出しない。エラーはすべてログに記録する
        """
        try:
            if file_path:
                file_path = str(file_path)
                self._remove_file(file_path)
                self._registered.pop(file_path, None)
            else:
                for registered in list(self._registered):
                    self._remove_file(registered)
                self._registered.clear()
        except Exception as e:
            logger.error(f"Error during cleanup of {file_path or 'all files'}: {e}")

    def cleanup_old_files(self) -> int:
        """
        一時ディレクトリ内の古いファイルを削除する.

        Returns:
            削除したファイル数

        Note:
            例外は送出しない。エラーはすべてログに記録する
        """
        try:
            removed = sweep_old_files(self.storage, self.directory, self.max_age)
        except Exception as e:
            logger.error(f"Error during old files cleanup: {e}")
            return 0

        for relative in removed:
            self._registered.pop(self.storage.path(relative), None)
        return len(removed)

    def _remove_file(self, file_path: str) -> bool:
        """
        ファイルをストレージから削除する.

        Returns:
            ファイルを削除した場合はTrue
        """
        try:
            relative = self._relative_path(file_path)
            if self.storage.exists(relative):
                self.storage.delete(relative)
                return True
        except Exception as e:
            logger.error(f"Failed to remove temporary file {file_path}: {e}")
        return False

    def _relative_path(self, full_path: str) -> str:
        """
        絶対パスをディスクからの相対パスに変換する.

        Raises:
            ValueError: パスがディスクのルート配下にない場合
        """
        root = Path(self.storage.path(""))
        try:
            return Path(full_path).relative_to(root).as_posix()
        except ValueError:
            raise ValueError(f"Path is not on disk [{self.disk}]: {full_path}") from None

    def close(self) -> None:
        """登録済みの全ファイルを削除する（エラーはすべて無視する）."""
        try:
            self.cleanup()
        except Exception:
            # 終了処理中はエラーを通知する手段がない
            pass

    def __del__(self):
        # 初期化に失敗したインスタンスには登録情報がない
        if "_registered" in self.__dict__ and "storage" in self.__dict__:
            self.close()


@contextmanager
def temp_file_session(
    config: Optional[TempFilesConfig] = None,
    disks: Optional[DiskManager] = None,
    http_client: Optional[httpx.Client] = None,
) -> Generator[TempFileManager, None, None]:
    """
    TempFileManagerを生成し、終了時に登録済みファイルを削除するコンテキストマネージャー.

    Yields:
        TempFileManager: 一時ファイルマネージャー

    Note:
        コンテキスト終了時に（例外が発生しても）必ずクリーンアップする
    """
    manager = TempFileManager.from_config(
        config or TempFilesConfig(), disks=disks, http_client=http_client
    )
    try:
        yield manager
    finally:
        manager.close()
