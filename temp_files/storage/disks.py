"""名前付きディスク（ストレージバックエンドのインスタンス）の管理."""

import logging
from typing import Dict, Mapping, Optional

from temp_files.models.config import DiskConfig
from temp_files.storage.base import StorageBackend
from temp_files.storage.local import LocalStorage

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """ストレージバックエンドを利用できないエラー."""
    pass


class DiskManager:
    """
    ディスク名からストレージバックエンドを解決するクラス.

    バックエンドは最初に要求されたときに生成し、以降は同じインスタンスを返す。
    """

    # driver名 -> バックエンドのファクトリ
    DRIVERS = {
        "local": lambda config: LocalStorage(config.root),
    }

    def __init__(
        self,
        disks: Optional[Mapping[str, DiskConfig]] = None,
        backends: Optional[Mapping[str, StorageBackend]] = None,
    ):
        """
        Args:
            disks: ディスク名 -> ディスク設定
            backends: 生成済みのバックエンド（設定より優先される）
        """
        self.disks: Dict[str, DiskConfig] = dict(disks or {})
        self._backends: Dict[str, StorageBackend] = dict(backends or {})

    def disk(self, name: str) -> StorageBackend:
        """
        ディスク名に対応するバックエンドを返す.

        Raises:
            StorageUnavailableError: ディスク名またはドライバが不明な場合
        """
        if name in self._backends:
            return self._backends[name]

        config = self.disks.get(name)
        if config is None:
            raise StorageUnavailableError(f"Disk [{name}] is not configured")

        factory = self.DRIVERS.get(config.driver)
        if factory is None:
            raise StorageUnavailableError(
                f"Driver [{config.driver}] is not supported for disk [{name}]"
            )

        backend = factory(config)
        logger.debug(f"Disk [{name}] resolved with driver {config.driver}")
        self._backends[name] = backend
        return backend
