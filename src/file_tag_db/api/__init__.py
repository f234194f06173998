"""タグストアの操作（サブコマンド相当）.

各 run_* / list_* 関数は DB を開き、1つのトランザクション内で処理してコミットします。
delete_tag などトランザクションを引数に取る関数はコミットしません（呼び出し側の責務）。
"""

from __future__ import annotations

from loguru import logger

from file_tag_db import storage
from file_tag_db.core.entities import Tag, Value, validate_tag_name, validate_value_name
from file_tag_db.core.exceptions import NotFoundError
from file_tag_db.storage import Transaction


def load_existing_tag(tx: Transaction, name: str) -> Tag:
    """名前からタグを取得する（存在しなければ NotFoundError）."""
    tag = storage.tag.tag_by_name(tx, name)
    if tag is None:
        raise NotFoundError(f"no such tag '{name}'", name)
    return tag


def load_existing_value(tx: Transaction, name: str) -> Value:
    """名前から値を取得する（存在しなければ NotFoundError）."""
    value = storage.value.value_by_name(tx, name)
    if value is None:
        raise NotFoundError(f"no such value '{name}'", name)
    return value


def load_or_create_tag(tx: Transaction, name: str) -> Tag:
    """名前からタグを取得し、無ければ検証したうえで作成する."""
    tag = storage.tag.tag_by_name(tx, name)
    if tag is not None:
        return tag

    validate_tag_name(name)
    logger.info(f"New tag '{name}'")
    return storage.tag.insert_tag(tx, name)


def load_or_create_value(tx: Transaction, name: str) -> Value:
    """名前から値を取得し、無ければ検証したうえで作成する."""
    value = storage.value.value_by_name(tx, name)
    if value is not None:
        return value

    validate_value_name(name)
    logger.info(f"New value '{name}'")
    return storage.value.insert_value(tx, name)
