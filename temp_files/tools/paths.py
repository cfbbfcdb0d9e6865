"""
temp_files_get_path MCPツールの実装
"""
import asyncio
from typing import Dict, Any

from pydantic import ValidationError

from ..core.filename_policy import resolve_temp_path
from ..models.config import TempFilesConfig
from ..models.schemas import TempPathRequest, TempPathSuccess, ErrorDetail, ToolError
from ..storage.disks import DiskManager, StorageUnavailableError


async def get_temp_path(arguments: Dict[str, Any], config: TempFilesConfig) -> Dict[str, Any]:
    """
    ファイル名に対応する一時ファイルのパスを返すMCPツール（ファイルは作成しない）

    Args:
        arguments: MCPツール呼び出し時の引数
            - filename: ファイル名（必須）
            - extension: 拡張子（任意）
        config: 一時ファイル管理の設定

    Returns:
        結果を含む辞書（TempPathSuccessまたはToolError）
    """
    try:
        request = TempPathRequest(**arguments)
        # パスの解決のみ（ディレクトリは作成しない）
        storage = DiskManager(config.disks).disk(config.disk)
        path = await asyncio.to_thread(
            resolve_temp_path, storage, config.directory, request.filename, request.extension
        )
        return TempPathSuccess(path=path).model_dump()

    except ValidationError as e:
        # 入力検証エラー
        error_detail = ErrorDetail(
            code="INVALID_INPUT",
            message="Invalid input parameters",
            details=str(e),
        )
        return ToolError(error=error_detail).model_dump()

    except StorageUnavailableError as e:
        error_detail = ErrorDetail(
            code="STORAGE_UNAVAILABLE",
            message="Temp file storage is not available",
            details=str(e),
        )
        return ToolError(error=error_detail).model_dump()


# ツール定義（MCP Server登録用）
TOOL_DEFINITION = {
    "name": "temp_files_get_path",
    "description": (
        "ファイル名に対応する一時ファイルの絶対パスを返します。ファイルは作成しません。"
    ),
    "inputSchema": {
        "type": "object",
        "properties": {
            "filename": {
                "type": "string",
                "description": "ファイル名",
            },
            "extension": {
                "type": "string",
                "description": "拡張子（指定時はファイル名の拡張子より優先）",
            },
        },
        "required": ["filename"],
    },
}
