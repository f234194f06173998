"""tag テーブルの CRUD."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from file_tag_db.core.entities import Tag, TagFileCount
from file_tag_db.core.exceptions import IntegrityViolationError

from .transaction import Transaction


def _parse_tag(row: sqlite3.Row) -> Tag:
    return Tag(id=row["id"], name=row["name"])


def tag_count(tx: Transaction) -> int:
    return tx.count_from_table("tag")


def tags(tx: Transaction) -> list[Tag]:
    sql = """
        SELECT id, name
        FROM tag
        ORDER BY name
    """
    return tx.query_all(sql, (), _parse_tag)


def tags_by_names(tx: Transaction, names: Sequence[str]) -> list[Tag]:
    if not names:
        return []

    placeholders = ", ".join("?" for _ in names)
    sql = f"""
        SELECT id, name
        FROM tag
        WHERE name IN ({placeholders})
    """
    return tx.query_all(sql, tuple(names), _parse_tag)


def tag_by_name(tx: Transaction, name: str) -> Tag | None:
    results = tags_by_names(tx, [name])
    return results[0] if results else None


def tag_by_id(tx: Transaction, tag_id: int) -> Tag | None:
    sql = """
        SELECT id, name
        FROM tag
        WHERE id = ?
    """
    return tx.query_single(sql, (tag_id,), _parse_tag)


def insert_tag(tx: Transaction, name: str) -> Tag:
    tx.execute("INSERT INTO tag (name) VALUES (?)", (name,))
    return Tag(id=tx.last_inserted_row_id(), name=name)


def rename_tag(tx: Transaction, tag_id: int, name: str) -> None:
    sql = """
        UPDATE tag
        SET name = ?
        WHERE id = ?
    """
    affected = tx.execute(sql, (name, tag_id))
    if affected != 1:
        raise IntegrityViolationError(f"Renaming tag #{tag_id}", expected=1, actual=affected)


def delete_tag(tx: Transaction, tag_id: int) -> None:
    affected = tx.execute("DELETE FROM tag WHERE id = ?", (tag_id,))
    if affected != 1:
        raise IntegrityViolationError(f"Deleting tag #{tag_id}", expected=1, actual=affected)


def tag_usage(tx: Transaction) -> list[TagFileCount]:
    """タグごとの使用数（タグ付けされたファイル数）を返す."""
    sql = """
        SELECT t.id, t.name, count(DISTINCT ft.file_id) AS file_count
        FROM file_tag ft
        JOIN tag t ON t.id = ft.tag_id
        GROUP BY t.id
        ORDER BY t.name
    """
    return tx.query_all(
        sql,
        (),
        lambda r: TagFileCount(id=r["id"], name=r["name"], file_count=r["file_count"]),
    )
