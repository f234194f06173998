"""file テーブルの CRUD."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import datetime

from file_tag_db.core.entities import File
from file_tag_db.core.paths import ScopedPath

from .transaction import Transaction


def format_mod_time(mod_time: datetime) -> str:
    """mod_time を `YYYY-MM-DD HH:MM:SS.ffffff+HH:MM` 形式にする（タイムゾーン必須）."""
    if mod_time.tzinfo is None:
        raise ValueError("mod_time must be timezone-aware")
    return mod_time.isoformat(sep=" ", timespec="microseconds")


def parse_mod_time(text: str) -> datetime:
    return datetime.fromisoformat(text)


def _parse_file(row: sqlite3.Row) -> File:
    return File(
        id=row["id"],
        directory=row["directory"],
        name=row["name"],
        fingerprint=row["fingerprint"],
        mod_time=parse_mod_time(row["mod_time"]),
        size=row["size"],
        is_dir=bool(row["is_dir"]),
    )


_SELECT_FILE = """
    SELECT id, directory, name, fingerprint, mod_time, size, is_dir
    FROM file
"""


def file_count(tx: Transaction) -> int:
    return tx.count_from_table("file")


def file_by_path(tx: Transaction, scoped_path: ScopedPath) -> File | None:
    directory, name = scoped_path.inner_as_dir_and_name()
    sql = _SELECT_FILE + "WHERE directory = ? AND name = ?"
    return tx.query_single(sql, (directory, name), _parse_file)


def file_by_id(tx: Transaction, file_id: int) -> File | None:
    return tx.query_single(_SELECT_FILE + "WHERE id = ?", (file_id,), _parse_file)


def insert_file(
    tx: Transaction,
    scoped_path: ScopedPath,
    *,
    fingerprint: str,
    mod_time: datetime,
    size: int,
    is_dir: bool,
) -> File:
    if size < 0:
        raise ValueError(f"File size cannot be negative: {size}")

    directory, name = scoped_path.inner_as_dir_and_name()
    sql = """
        INSERT INTO file (directory, name, fingerprint, mod_time, size, is_dir)
        VALUES (?, ?, ?, ?, ?, ?)
    """
    tx.execute(sql, (directory, name, fingerprint, format_mod_time(mod_time), size, is_dir))
    return File(
        id=tx.last_inserted_row_id(),
        directory=directory,
        name=name,
        fingerprint=fingerprint,
        mod_time=mod_time,
        size=size,
        is_dir=is_dir,
    )


def delete_untagged_files(tx: Transaction, file_ids: Iterable[int]) -> int:
    """指定ファイルのうち、file_tag が1件も残っていないものを削除する.

    Returns:
        削除したファイル数
    """
    sql = """
        DELETE FROM file
        WHERE id = ?1
        AND (SELECT count(1)
             FROM file_tag
             WHERE file_id = ?1) == 0
    """
    deleted = 0
    for file_id in dict.fromkeys(file_ids):
        deleted += tx.execute(sql, (file_id,))
    return deleted
