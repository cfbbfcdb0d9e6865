"""temp-files:cleanup コマンド - 古い一時ファイルの削除."""

import logging
import sys
from typing import Optional, Sequence

from temp_files.core.file_manager import TempFileManager
from temp_files.models.config import load_config

COMMAND_NAME = "temp-files:cleanup"

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    設定を読み込み、古い一時ファイルを削除する.

    フラグは受け付けない。個々のファイルの削除エラーはマネージャー内で
    ログに記録されるため、コマンド自体は失敗しない。

    Returns:
        終了コード（常に0）
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    args = list(sys.argv[1:] if argv is None else argv)
    if args:
        logger.warning(f"{COMMAND_NAME} takes no arguments, ignoring: {' '.join(args)}")

    config = load_config()
    manager = TempFileManager.from_config(config)

    print("Cleaning up old temporary files...")
    removed = manager.cleanup_old_files()
    print(f"Cleanup completed successfully! ({removed} file(s) removed)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
