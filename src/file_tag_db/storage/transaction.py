"""SQLite ストアとトランザクション.

Storage は DB 接続とルートディレクトリ（CanonicalPath）を保持し、Transaction は
1つの BEGIN〜COMMIT/ROLLBACK を表します。

接続は autocommit モード（isolation_level=None）で開き、BEGIN / COMMIT / ROLLBACK は
明示的に発行します。Transaction はコンテキストマネージャとして使うと、例外時は
ROLLBACK、正常終了時は COMMIT します。

使用例:
    >>> with Storage.open(db_path) as store:
    ...     with store.begin_transaction() as tx:
    ...         tag = tag_store.tag_by_name(tx, "music")
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any, TypeVar

from loguru import logger

from file_tag_db.core.config import determine_root_path
from file_tag_db.core.database import apply_connection_pragmas, create_database
from file_tag_db.core.exceptions import FileTagDBError, NotFoundError, StoreAccessError
from file_tag_db.core.paths import CanonicalPath

T = TypeVar("T")

Params = Sequence[Any]
RowParser = Callable[[sqlite3.Row], T]


class Transaction:
    """開いているトランザクション.

    コミットやロールバックの後は使用できません。
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._active = False
        self._last_row_id = 0
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as e:
            raise StoreAccessError(f"Could not begin transaction: {e}") from e
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def commit(self) -> None:
        self._ensure_active()
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            self.rollback()
            raise StoreAccessError(f"Could not commit transaction: {e}") from e
        self._active = False

    def rollback(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            raise StoreAccessError(f"Could not roll back transaction: {e}") from e

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is not None:
            if self._active:
                logger.error(f"Rolling back transaction: {exc}")
                try:
                    self.rollback()
                except StoreAccessError:
                    # 元の例外をそのまま伝播させる
                    logger.exception("Rollback failed")
            return
        if self._active:
            self.commit()

    def _ensure_active(self) -> None:
        if not self._active:
            raise FileTagDBError("Transaction is no longer active")

    def execute(self, sql: str, params: Params = ()) -> int:
        """SQL を実行し、影響を受けた行数を返す."""
        self._ensure_active()
        try:
            cur = self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StoreAccessError(f"Statement failed: {e}") from e
        self._last_row_id = cur.lastrowid or self._last_row_id
        return cur.rowcount

    def query_single(self, sql: str, params: Params, parse: RowParser[T]) -> T | None:
        """先頭の1行を parse して返す（0行なら None）."""
        self._ensure_active()
        try:
            row = self._conn.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StoreAccessError(f"Query failed: {e}") from e
        return parse(row) if row is not None else None

    def query_all(self, sql: str, params: Params, parse: RowParser[T]) -> list[T]:
        self._ensure_active()
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreAccessError(f"Query failed: {e}") from e
        return [parse(r) for r in rows]

    def count_from_table(self, table: str) -> int:
        count = self.query_single(f"SELECT count(1) FROM {table}", (), lambda r: r[0])
        return int(count or 0)

    def last_inserted_row_id(self) -> int:
        return self._last_row_id


class Storage:
    """タグストア（SQLite DB ファイル + ルートディレクトリ）.

    Attributes:
        db_path: 正規化済みの DB ファイルパス
        root: タグ付けのルートディレクトリ。ここから作る ScopedPath はこのオブジェクトを共有する
    """

    def __init__(self, db_path: Path, root: CanonicalPath, conn: sqlite3.Connection) -> None:
        self.db_path = db_path
        self.root = root
        self._conn = conn
        self._tx: Transaction | None = None

    @classmethod
    def create_at(cls, db_path: Path | str) -> None:
        """DB を作成する（親ディレクトリは作成しない）."""
        create_database(db_path)

    @classmethod
    def open(cls, db_path: Path | str) -> Storage:
        """既存の DB を開く.

        Raises:
            NotFoundError: DB ファイルまたはルートディレクトリが存在しない場合
            StoreAccessError: 接続に失敗した場合
        """
        db_path = Path(db_path)
        if not db_path.is_file():
            raise NotFoundError(f"No database found at {db_path}", db_path)

        # シンボリックリンク越しの DB でも同じルートになるよう正規化する
        canonical_db = CanonicalPath(db_path).path
        root = CanonicalPath(determine_root_path(canonical_db))

        logger.debug(f"Opening database {canonical_db} (root: {root})")
        try:
            conn = sqlite3.connect(canonical_db, isolation_level=None)
            conn.row_factory = sqlite3.Row
            apply_connection_pragmas(conn)
        except sqlite3.Error as e:
            raise StoreAccessError(f"Could not open database {canonical_db}: {e}") from e

        return cls(canonical_db, root, conn)

    def begin_transaction(self) -> Transaction:
        """トランザクションを開始する（同時に開けるのは1つだけ）."""
        if self._tx is not None and self._tx.active:
            raise FileTagDBError("A transaction is already in progress")
        self._tx = Transaction(self._conn)
        return self._tx

    def close(self) -> None:
        if self._tx is not None and self._tx.active:
            self._tx.rollback()
        self._conn.close()

    def __enter__(self) -> Storage:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# 「値なし」を表す DB 上の value_id
NO_VALUE_ID = 0


def value_id_to_db(value_id: int | None) -> int:
    return NO_VALUE_ID if value_id is None else value_id


def value_id_from_db(value_id: int) -> int | None:
    return None if value_id == NO_VALUE_ID else value_id
