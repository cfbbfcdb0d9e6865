"""Temp Files - 一時ファイルの保存・追跡・クリーンアップ."""

from temp_files.core.file_manager import (
    TempFileManager,
    TempFileError,
    TempFileSaveError,
    DownloadFailedError,
    InvalidDownloadUrlError,
    DownloadTimeoutError,
    DownloadSizeExceededError,
    temp_file_session,
)
from temp_files.models.config import TempFilesConfig, load_config
from temp_files.models.content import UploadedFile
from temp_files.storage.disks import DiskManager, StorageUnavailableError

__all__ = [
    "TempFileManager",
    "TempFileError",
    "TempFileSaveError",
    "DownloadFailedError",
    "InvalidDownloadUrlError",
    "DownloadTimeoutError",
    "DownloadSizeExceededError",
    "temp_file_session",
    "TempFilesConfig",
    "load_config",
    "UploadedFile",
    "DiskManager",
    "StorageUnavailableError",
]
