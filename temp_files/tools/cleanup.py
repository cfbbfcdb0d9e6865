"""
temp_files_cleanup MCPツールの実装
"""
import asyncio
from typing import Dict, Any, Tuple

from ..core.file_manager import TempFileManager
from ..models.config import TempFilesConfig
from ..models.schemas import CleanupSuccess, ErrorDetail, ToolError
from ..storage.disks import StorageUnavailableError


async def cleanup_old_files(config: TempFilesConfig) -> Dict[str, Any]:
    """
    一時ディレクトリ内の古いファイルを削除するMCPツール

    Args:
        config: 一時ファイル管理の設定

    Returns:
        削除結果を含む辞書（CleanupSuccessまたはToolError）
    """
    try:
        directory, removed = await asyncio.to_thread(_sweep, config)

        return CleanupSuccess(
            removed=removed,
            directory=directory,
            max_age_hours=config.max_age_hours,
        ).model_dump()

    except StorageUnavailableError as e:
        # ディスクまたはディレクトリが利用できない
        error_detail = ErrorDetail(
            code="STORAGE_UNAVAILABLE",
            message="Temp file storage is not available",
            details=str(e),
        )
        return ToolError(error=error_detail).model_dump()


def _sweep(config: TempFilesConfig) -> Tuple[str, int]:
    """マネージャーを作成して古いファイルを削除する（ブロッキング処理）."""
    manager = TempFileManager.from_config(config)
    return manager.directory, manager.cleanup_old_files()


# ツール定義（MCP Server登録用）
TOOL_DEFINITION = {
    "name": "temp_files_cleanup",
    "description": (
        "一時ディレクトリ内で、設定された経過時間（max_age_hours）より古いファイルを削除します。"
    ),
    "inputSchema": {
        "type": "object",
        "properties": {},
    },
}
