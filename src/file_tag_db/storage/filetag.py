"""file_tag テーブルの CRUD.

DB 上の value_id = 0（値なし）はここで None と相互変換します。
"""

from __future__ import annotations

import sqlite3

from file_tag_db.core.entities import FileTag
from file_tag_db.core.exceptions import IntegrityViolationError

from .transaction import NO_VALUE_ID, Transaction, value_id_from_db, value_id_to_db


def _parse_file_tag(row: sqlite3.Row) -> FileTag:
    return FileTag(
        file_id=row["file_id"],
        tag_id=row["tag_id"],
        value_id=value_id_from_db(row["value_id"]),
    )


def file_tag_count(tx: Transaction) -> int:
    return tx.count_from_table("file_tag")


def file_tags_by_file_id(tx: Transaction, file_id: int) -> list[FileTag]:
    sql = """
        SELECT file_id, tag_id, value_id
        FROM file_tag
        WHERE file_id = ?
    """
    return tx.query_all(sql, (file_id,), _parse_file_tag)


def file_tags_by_tag_id(tx: Transaction, tag_id: int) -> list[FileTag]:
    sql = """
        SELECT file_id, tag_id, value_id
        FROM file_tag
        WHERE tag_id = ?
    """
    return tx.query_all(sql, (tag_id,), _parse_file_tag)


def file_tags_by_value_id(tx: Transaction, value_id: int) -> list[FileTag]:
    if value_id == NO_VALUE_ID:
        raise IntegrityViolationError("Searching file tags with a value ID of 0 is meaningless")

    sql = """
        SELECT file_id, tag_id, value_id
        FROM file_tag
        WHERE value_id = ?
    """
    return tx.query_all(sql, (value_id,), _parse_file_tag)


def add_file_tag(tx: Transaction, file_id: int, tag_id: int, value_id: int | None) -> int:
    """タグ付けを追加する（既存なら何もしない）.

    Returns:
        追加した行数（0 または 1）
    """
    sql = """
        INSERT OR IGNORE INTO file_tag (file_id, tag_id, value_id)
        VALUES (?, ?, ?)
    """
    return tx.execute(sql, (file_id, tag_id, value_id_to_db(value_id)))


def delete_file_tag(tx: Transaction, file_id: int, tag_id: int, value_id: int | None) -> None:
    sql = """
        DELETE FROM file_tag
        WHERE file_id = ? AND tag_id = ? AND value_id = ?
    """
    affected = tx.execute(sql, (file_id, tag_id, value_id_to_db(value_id)))
    if affected != 1:
        raise IntegrityViolationError(
            f"Deleting file tag (file #{file_id}, tag #{tag_id}, value {value_id})",
            expected=1,
            actual=affected,
        )


def delete_file_tags_by_tag_id(tx: Transaction, tag_id: int) -> int:
    return tx.execute("DELETE FROM file_tag WHERE tag_id = ?", (tag_id,))


def delete_file_tags_by_value_id(tx: Transaction, value_id: int) -> int:
    if value_id == NO_VALUE_ID:
        raise IntegrityViolationError("Deleting file tags with a value ID of 0 is meaningless")

    return tx.execute("DELETE FROM file_tag WHERE value_id = ?", (value_id,))

