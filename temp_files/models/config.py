"""一時ファイル管理の設定."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# パッケージ同梱のデフォルト設定ファイル
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "temp_files.yaml"


def _default_local_root() -> str:
    return str(Path(tempfile.gettempdir()) / "temp_files")


class DiskConfig(BaseModel):
    """ディスク（ストレージバックエンド）の設定."""

    driver: str = Field("local", description="ドライバ名")
    root: str = Field(default_factory=_default_local_root, description="ルートディレクトリ")


class TempFilesConfig(BaseModel):
    """TempFileManagerの設定."""

    directory: str = Field("temp", min_length=1, description="ディスク内の一時ディレクトリ")
    max_age_hours: float = Field(10, ge=0, description="古いファイルとみなす経過時間（時間）")
    disk: str = Field("local", min_length=1, description="使用するディスク名")
    download_timeout: float = Field(30, gt=0, description="URLダウンロードのタイムアウト秒数")
    max_download_size: int = Field(50 * 1024 * 1024, gt=0, description="ダウンロード可能な最大サイズ（バイト）")
    disks: Dict[str, DiskConfig] = Field(
        default_factory=lambda: {"local": DiskConfig()},
        description="ディスク名 -> ディスク設定",
    )


# 環境変数 -> (設定キー, 型)
ENV_OVERRIDES = {
    "TEMP_FILES_DIRECTORY": ("directory", str),
    "TEMP_FILES_MAX_AGE_HOURS": ("max_age_hours", float),
    "TEMP_FILES_DISK": ("disk", str),
    "TEMP_FILES_DOWNLOAD_TIMEOUT": ("download_timeout", float),
}


def load_config(config_path: Optional[Path] = None) -> TempFilesConfig:
    """
    設定ファイルと環境変数から設定を読み込む.

    優先順位:
    1. 環境変数 (TEMP_FILES_*)
    2. 設定ファイル (引数 > TEMP_FILES_CONFIG > 同梱のconfig/temp_files.yaml)
    3. デフォルト値

    Args:
        config_path: YAML設定ファイルのパス

    Returns:
        TempFilesConfig: 読み込んだ設定

    Note:
        設定ファイルの読み込みエラーや不正な値は警告としてログに出し、
        デフォルト値で継続する
    """
    if config_path is None:
        env_path = os.environ.get("TEMP_FILES_CONFIG")
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    values = _read_yaml(config_path)
    _apply_env_overrides(values)

    try:
        return TempFilesConfig(**values)
    except ValidationError as e:
        logger.warning(f"Invalid temp files configuration, using defaults: {e}")
        return TempFilesConfig()


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    """YAML設定ファイルを辞書として読み込む（存在しない場合は空）."""
    if not config_path.exists():
        logger.debug(f"Config file {config_path} not found, using defaults")
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to read config file {config_path}: {e}")
        return {}

    if config is None:
        return {}
    if not isinstance(config, dict):
        logger.warning(f"Config file {config_path} must contain a mapping")
        return {}

    # temp_files: セクションがあればその中身を使う
    section = config.get("temp_files", config)
    return dict(section) if isinstance(section, dict) else {}


def _apply_env_overrides(values: Dict[str, Any]) -> None:
    """環境変数による上書きを適用する."""
    for env_name, (key, cast) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            values[key] = cast(raw)
        except ValueError:
            # 不正な値は無視して設定ファイル/デフォルトを使う
            logger.warning(f"Ignoring invalid value for {env_name}: {raw!r}")

    local_root = os.environ.get("TEMP_FILES_LOCAL_ROOT")
    if local_root:
        disks = dict(values.get("disks") or {})
        local = disks.get("local")
        local = dict(local) if isinstance(local, dict) else {"driver": "local"}
        local["root"] = local_root
        disks["local"] = local
        values["disks"] = disks
