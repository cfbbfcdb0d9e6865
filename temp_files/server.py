"""Temp Files MCP Server - メインサーバー実装."""

import asyncio
import json

from mcp.server import Server
from mcp.types import Tool, TextContent
import mcp.server.stdio

from temp_files.models.config import load_config
from temp_files.tools import cleanup, paths


# サーバーインスタンス
server = Server("temp-files-mcp-server")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """
    利用可能なMCPツールの一覧を返す.

    Returns:
        ツール定義のリスト
    """
    return [
        Tool(**cleanup.TOOL_DEFINITION),
        Tool(**paths.TOOL_DEFINITION),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """
    MCPツールを実行する.

    Args:
        name: ツール名
        arguments: ツール引数

    Returns:
        実行結果
    """
    # 呼び出しごとに設定を読み込む（環境変数の変更を反映するため）
    config = load_config()

    if name == "temp_files_cleanup":
        result = await cleanup.cleanup_old_files(config)

    elif name == "temp_files_get_path":
        result = await paths.get_temp_path(arguments or {}, config)

    else:
        return [TextContent(type="text", text=f"Error: Unknown tool '{name}'")]

    # 結果をJSON文字列として返す
    return [TextContent(type="text", text=json.dumps(result, indent=2, ensure_ascii=False))]


async def run_server():
    """MCPサーバーを起動する."""
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


def main():
    """エントリーポイント."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
