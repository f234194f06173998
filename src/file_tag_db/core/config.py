"""データベースファイルの位置決定.

優先順位:
    1. 明示的に指定されたパス
    2. 環境変数 TMSU_DB
    3. カレントディレクトリから上方向に探索して最初に見つかった `.tmsu/db`
    4. `~/.tmsu/default.db`

使用例:
    >>> db_path = locate_db()
    >>> root = determine_root_path(db_path)
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from .exceptions import FileTagDBError, NotFoundError

DB_ENV_VAR = "TMSU_DB"
DEFAULT_DB_DIR_NAME = ".tmsu"
DEFAULT_DB_FILE_NAME = "db"
DEFAULT_HOME_DB_FILE_NAME = "default.db"


def find_db_upwards(start: Path) -> Path | None:
    """start から親ディレクトリへ向かって `.tmsu/db` を探す."""
    start = start.absolute()
    for directory in (start, *start.parents):
        candidate = directory / DEFAULT_DB_DIR_NAME / DEFAULT_DB_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def locate_db(
    explicit: Path | str | None = None,
    *,
    cwd: Path | str | None = None,
    home: Path | str | None = None,
) -> Path:
    """使用するデータベースファイルのパスを決定する.

    Args:
        explicit: 明示的に指定された DB パス（--database 相当）
        cwd: 探索開始ディレクトリ（None の場合はカレントディレクトリ）
        home: ホームディレクトリ（None の場合は Path.home()）

    Returns:
        DB ファイルのパス。既定の `~/.tmsu/default.db` は存在しなくても返す

    Raises:
        NotFoundError: 明示指定または環境変数のパスが存在しない場合
    """
    if explicit is not None:
        db_path = Path(explicit)
        if not db_path.exists():
            raise NotFoundError(f"Database not found: {db_path}", db_path)
        logger.debug(f"Using database from explicit path: {db_path}")
        return db_path

    env_value = os.environ.get(DB_ENV_VAR)
    if env_value:
        db_path = Path(env_value)
        if not db_path.exists():
            raise NotFoundError(f"Database not found: {db_path} (from ${DB_ENV_VAR})", db_path)
        logger.debug(f"Using database from ${DB_ENV_VAR}: {db_path}")
        return db_path

    found = find_db_upwards(Path(cwd) if cwd is not None else Path.cwd())
    if found is not None:
        logger.debug(f"Found database: {found}")
        return found

    home_dir = Path(home) if home is not None else Path.home()
    db_path = home_dir / DEFAULT_DB_DIR_NAME / DEFAULT_HOME_DB_FILE_NAME
    logger.debug(f"Falling back to default database: {db_path}")
    return db_path


def determine_root_path(db_path: Path | str) -> Path:
    """DB ファイルの位置からタグ付けのルートディレクトリを決める.

    DB が `.tmsu` という名前のディレクトリにある場合はその親（DB から見て親の親）、
    それ以外は DB の直接の親ディレクトリをルートとします。

    Raises:
        FileTagDBError: 名前を持つ親ディレクトリが無い場合
    """
    parent = Path(db_path).parent
    if not parent.name:
        raise FileTagDBError(f"Could not determine root path for database '{db_path}'")

    if parent.name == DEFAULT_DB_DIR_NAME:
        return parent.parent

    return parent
