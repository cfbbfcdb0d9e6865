"""
MCPツールの入出力スキーマ定義
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class TempPathRequest(BaseModel):
    """temp_files_get_pathツールのリクエストパラメータ"""
    filename: str = Field(..., min_length=1, description="ファイル名")
    extension: Optional[str] = Field(None, description="拡張子（ファイル名の拡張子より優先）")


class TempPathSuccess(BaseModel):
    """パス予測の成功レスポンス"""
    success: bool = Field(True, description="常にTrue")
    path: str = Field(..., description="一時ファイルの絶対パス")


class CleanupSuccess(BaseModel):
    """古いファイル削除の成功レスポンス"""
    success: bool = Field(True, description="常にTrue")
    removed: int = Field(..., description="削除したファイル数")
    directory: str = Field(..., description="対象の一時ディレクトリ")
    max_age_hours: float = Field(..., description="削除対象とした経過時間（時間）")


class ErrorDetail(BaseModel):
    """エラー詳細情報"""
    code: str = Field(..., description="エラーコード")
    message: str = Field(..., description="エラーの概要メッセージ")
    details: str = Field(..., description="エラーの詳細説明")
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat(), description="エラー発生日時")


class ToolError(BaseModel):
    """失敗時のレスポンス"""
    success: bool = Field(False, description="常にFalse")
    error: ErrorDetail = Field(..., description="エラー詳細情報")
