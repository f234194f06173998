"""value テーブルの CRUD.

value_id = 0 は「値なし」の予約値なので、ここでは扱いません。
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from file_tag_db.core.entities import Value
from file_tag_db.core.exceptions import IntegrityViolationError

from .transaction import NO_VALUE_ID, Transaction


def _parse_value(row: sqlite3.Row) -> Value:
    return Value(id=row["id"], name=row["name"])


def _assert_real_value_id(value_id: int, action: str) -> None:
    if value_id == NO_VALUE_ID:
        raise IntegrityViolationError(f"{action} a value with ID {NO_VALUE_ID} is meaningless")


def value_count(tx: Transaction) -> int:
    return tx.count_from_table("value")


def values(tx: Transaction) -> list[Value]:
    sql = """
        SELECT id, name
        FROM value
        ORDER BY name
    """
    return tx.query_all(sql, (), _parse_value)


def values_by_names(tx: Transaction, names: Sequence[str]) -> list[Value]:
    if not names:
        return []

    placeholders = ", ".join("?" for _ in names)
    sql = f"""
        SELECT id, name
        FROM value
        WHERE name IN ({placeholders})
    """
    return tx.query_all(sql, tuple(names), _parse_value)


def value_by_name(tx: Transaction, name: str) -> Value | None:
    results = values_by_names(tx, [name])
    return results[0] if results else None


def value_by_id(tx: Transaction, value_id: int) -> Value | None:
    sql = """
        SELECT id, name
        FROM value
        WHERE id = ?
    """
    return tx.query_single(sql, (value_id,), _parse_value)


def values_by_tag_id(tx: Transaction, tag_id: int) -> list[Value]:
    """指定タグと一緒に使われている値を返す."""
    sql = """
        SELECT id, name
        FROM value
        WHERE id IN (SELECT value_id
                     FROM file_tag
                     WHERE tag_id = ?)
        ORDER BY name
    """
    return tx.query_all(sql, (tag_id,), _parse_value)


def insert_value(tx: Transaction, name: str) -> Value:
    tx.execute("INSERT INTO value (name) VALUES (?)", (name,))
    return Value(id=tx.last_inserted_row_id(), name=name)


def rename_value(tx: Transaction, value_id: int, name: str) -> None:
    _assert_real_value_id(value_id, "Renaming")

    sql = """
        UPDATE value
        SET name = ?
        WHERE id = ?
    """
    affected = tx.execute(sql, (name, value_id))
    if affected != 1:
        raise IntegrityViolationError(f"Renaming value #{value_id}", expected=1, actual=affected)


def delete_value(tx: Transaction, value_id: int) -> None:
    _assert_real_value_id(value_id, "Deleting")

    affected = tx.execute("DELETE FROM value WHERE id = ?", (value_id,))
    if affected != 1:
        raise IntegrityViolationError(f"Deleting value #{value_id}", expected=1, actual=affected)
