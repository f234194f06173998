"""implication テーブルの CRUD.

含意元・含意先それぞれの value_id = 0 は「値なし」を表します。
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence

from file_tag_db.core.entities import Implication, Tag, Value
from file_tag_db.core.exceptions import IntegrityViolationError

from .transaction import NO_VALUE_ID, Transaction, value_id_to_db

_SELECT_IMPLICATION = """
    SELECT i.tag_id, t.name AS tag_name,
           i.value_id, v.name AS value_name,
           i.implied_tag_id, it.name AS implied_tag_name,
           i.implied_value_id, iv.name AS implied_value_name
    FROM implication i
    JOIN tag t ON t.id = i.tag_id
    LEFT JOIN value v ON v.id = i.value_id
    JOIN tag it ON it.id = i.implied_tag_id
    LEFT JOIN value iv ON iv.id = i.implied_value_id
"""

_ORDER_BY = """
    ORDER BY t.name, v.name, it.name, iv.name
"""


def _parse_value(value_id: int, name: str | None) -> Value | None:
    if value_id == NO_VALUE_ID:
        return None
    if name is None:
        raise IntegrityViolationError(f"Implication references missing value #{value_id}")
    return Value(id=value_id, name=name)


def _parse_implication(row: sqlite3.Row) -> Implication:
    return Implication(
        tag=Tag(id=row["tag_id"], name=row["tag_name"]),
        value=_parse_value(row["value_id"], row["value_name"]),
        implied_tag=Tag(id=row["implied_tag_id"], name=row["implied_tag_name"]),
        implied_value=_parse_value(row["implied_value_id"], row["implied_value_name"]),
    )


def implication_count(tx: Transaction) -> int:
    return tx.count_from_table("implication")


def implications(tx: Transaction) -> list[Implication]:
    return tx.query_all(_SELECT_IMPLICATION + _ORDER_BY, (), _parse_implication)


def implications_for(tx: Transaction, pairs: Sequence[tuple[int, int | None]]) -> list[Implication]:
    """(tag_id, value_id?) の組を含意元とする含意ルールを返す.

    含意元に値が無いルールはタグの値に関係なく返し、値があるルールは値が一致する場合のみ返す。
    """
    if not pairs:
        return []

    clauses: list[str] = []
    params: list[int] = []
    for tag_id, value_id in pairs:
        clauses.append(f"(i.tag_id = ? AND i.value_id = {NO_VALUE_ID})")
        params.append(tag_id)
        if value_id is not None:
            clauses.append("(i.tag_id = ? AND i.value_id = ?)")
            params.extend([tag_id, value_id])

    sql = _SELECT_IMPLICATION + "WHERE " + " OR ".join(clauses) + _ORDER_BY
    return tx.query_all(sql, params, _parse_implication)


def add_implication(
    tx: Transaction,
    tag_id: int,
    value_id: int | None,
    implied_tag_id: int,
    implied_value_id: int | None,
) -> int:
    sql = """
        INSERT OR IGNORE INTO implication (tag_id, value_id, implied_tag_id, implied_value_id)
        VALUES (?, ?, ?, ?)
    """
    params = (tag_id, value_id_to_db(value_id), implied_tag_id, value_id_to_db(implied_value_id))
    return tx.execute(sql, params)


def delete_implication(
    tx: Transaction,
    tag_id: int,
    value_id: int | None,
    implied_tag_id: int,
    implied_value_id: int | None,
) -> None:
    sql = """
        DELETE FROM implication
        WHERE tag_id = ? AND value_id = ? AND implied_tag_id = ? AND implied_value_id = ?
    """
    params = (tag_id, value_id_to_db(value_id), implied_tag_id, value_id_to_db(implied_value_id))
    affected = tx.execute(sql, params)
    if affected != 1:
        raise IntegrityViolationError("Deleting implication", expected=1, actual=affected)


def delete_implications_by_tag_id(tx: Transaction, tag_id: int) -> int:
    sql = """
        DELETE FROM implication
        WHERE tag_id = ?1 OR implied_tag_id = ?1
    """
    return tx.execute(sql, (tag_id,))


def delete_implications_by_value_id(tx: Transaction, value_id: int) -> int:
    if value_id == NO_VALUE_ID:
        raise IntegrityViolationError("Deleting implications with a value ID of 0 is meaningless")

    sql = """
        DELETE FROM implication
        WHERE value_id = ?1 OR implied_value_id = ?1
    """
    return tx.execute(sql, (value_id,))
