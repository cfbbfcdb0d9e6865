"""Data models for temp files."""

from .config import TempFilesConfig, DiskConfig, load_config
from .content import UploadedFile, BytesContent, StreamContent, UploadedFileContent, as_content

__all__ = [
    "TempFilesConfig",
    "DiskConfig",
    "load_config",
    "UploadedFile",
    "BytesContent",
    "StreamContent",
    "UploadedFileContent",
    "as_content",
]
