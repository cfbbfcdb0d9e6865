"""一時ファイル名のサニタイズと重複回避."""

import re
import secrets
import string
from typing import Optional, Tuple

from temp_files.storage.base import StorageBackend, StorageError


# 許可しない文字
UNSAFE_CHARS_PATTERN = re.compile(r'[^a-zA-Z0-9._-]')

# 連続する区切り文字（. _ -）
SEPARATOR_RUN_PATTERN = re.compile(r'[._-]{2,}')

# 名前がすべて除去された場合の代替名
FALLBACK_BASENAME = "file"

RANDOM_NAME_ALPHABET = string.ascii_letters + string.digits

# 連番を試す上限（常に「存在する」と答えるバックエンドへの対策）
MAX_UNIQUE_ATTEMPTS = 10000


def split_name(name: str) -> Tuple[str, str]:
    """
    ファイル名をベース名と拡張子に分割する.

    ディレクトリ部分（"/" または "\\" より前）は捨て、最後の "." で分割する。

    Args:
        name: ファイル名またはパス

    Returns:
        (ベース名, 拡張子) のタプル。拡張子がない場合は空文字
    """
    basename = name.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, extension = basename.rpartition(".")
    if not dot:
        return basename, ""
    return stem, extension


def _clean_segment(segment: str) -> str:
    segment = UNSAFE_CHARS_PATTERN.sub("_", segment)
    segment = SEPARATOR_RUN_PATTERN.sub("_", segment)
    return segment.strip("._-")


def sanitize_filename(name: str) -> str:
    """
    ユーザー入力由来のファイル名を安全な名前に変換する.

    処理内容:
    1. 英数字・"."・"_"・"-" 以外の文字を "_" に置換
    2. 連続する "." "_" "-" を1つの "_" に置換
    3. 先頭と末尾の "." "_" "-" を除去
    4. ベース名が空になった場合は "file" を使用

    拡張子にも同じ処理を適用し、空になった場合は拡張子なしとする。

    Args:
        name: 任意の文字列

    Returns:
        空でない安全なファイル名
    """
    basename, extension = split_name(name)

    basename = _clean_segment(basename) or FALLBACK_BASENAME
    extension = _clean_segment(extension)

    return f"{basename}.{extension}" if extension else basename


def random_filename(extension: Optional[str] = None, length: int = 32) -> str:
    """
    推測できないランダムなファイル名を生成する.

    Args:
        extension: 付与する拡張子（ドットなし）
        length: ランダム部分の文字数

    Returns:
        ランダムなファイル名
    """
    name = "".join(secrets.choice(RANDOM_NAME_ALPHABET) for _ in range(length))
    return f"{name}.{extension}" if extension else name


def unique_filename(
    storage: StorageBackend,
    directory: str,
    desired_name: str,
    max_attempts: int = MAX_UNIQUE_ATTEMPTS,
) -> str:
    """
    ディレクトリ内で重複しないファイル名を返す.

    desired_name が既に存在する場合は name_1.ext, name_2.ext, ... を順に試す。

    Args:
        storage: 存在確認に使うストレージ
        directory: 対象ディレクトリ（ディスクからの相対パス）
        desired_name: 希望するファイル名
        max_attempts: 連番を試す最大回数

    Returns:
        確認時点で存在しないファイル名

    Raises:
        StorageError: max_attempts 回試しても空き名が見つからない場合

    Note:
        存在確認から書き込みまでの間に他のプロセスが同名で書き込む可能性がある。
        この競合はロックせずに許容している。
    """
    if not storage.exists(f"{directory}/{desired_name}"):
        return desired_name

    basename, extension = split_name(desired_name)
    for counter in range(1, max_attempts + 1):
        candidate = (
            f"{basename}_{counter}.{extension}" if extension
            else f"{basename}_{counter}"
        )
        if not storage.exists(f"{directory}/{candidate}"):
            return candidate

    raise StorageError(
        f"Could not find an unused name for {desired_name} in {directory} "
        f"after {max_attempts} attempts"
    )


def resolve_temp_path(
    storage: StorageBackend,
    directory: str,
    filename: str,
    extension: Optional[str] = None,
) -> str:
    """
    一時ディレクトリ内のファイルの絶対パスを求める（ファイルもディレクトリも作成しない）.

    Args:
        storage: パスを解決するストレージ
        directory: 一時ディレクトリ（ディスクからの相対パス）
        filename: ファイル名
        extension: 拡張子（指定時はfilenameの拡張子より優先、先頭の"."は無視）

    Returns:
        一時ファイルの絶対パス
    """
    basename, embedded_extension = split_name(filename)
    if extension is not None:
        extension = extension.lstrip(".")
    else:
        extension = embedded_extension

    name = f"{basename}.{extension}" if extension else basename
    return storage.path(f"{directory.strip('/')}/{name}")
