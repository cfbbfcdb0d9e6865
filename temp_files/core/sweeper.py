"""一時ディレクトリ内の古いファイルの削除."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from temp_files.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def sweep_old_files(
    storage: StorageBackend,
    directory: str,
    max_age: timedelta,
    now: Optional[datetime] = None,
) -> List[str]:
    """
    最終更新日時が閾値より古いファイルを削除する.

    閾値は now - max_age。閾値ちょうど以降に更新されたファイルは残す。
    個々のファイルでエラーが発生しても残りのファイルの処理は継続する。

    Args:
        storage: 対象のストレージ
        directory: 一時ディレクトリ（ディスクからの相対パス）
        max_age: 保持する最大経過時間
        now: 現在時刻（省略時は datetime.now()）

    Returns:
        削除したファイルの相対パスのリスト

    Note:
        例外は送出しない。エラーはすべてログに記録する
    """
    if now is None:
        now = datetime.now()
    threshold = (now - max_age).timestamp()

    try:
        files = storage.files(directory)
    except Exception as e:
        logger.error(f"Error during old files cleanup: cannot list {directory}: {e}")
        return []

    removed: List[str] = []
    for file in files:
        try:
            if storage.last_modified(file) < threshold:
                storage.delete(file)
                removed.append(file)
        except Exception as e:
            logger.error(f"Failed to remove old temporary file {file}: {e}")

    logger.info(f"Removed {len(removed)} old file(s) from {directory}")
    return removed
