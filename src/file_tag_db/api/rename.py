"""タグ・値のリネーム.

新しい名前の検証と重複チェックは UPDATE の前に行うため、失敗時に DB は変更されません。
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from file_tag_db import api, storage
from file_tag_db.core.entities import validate_tag_name, validate_value_name
from file_tag_db.core.exceptions import AlreadyExistsError
from file_tag_db.storage import Storage, Transaction


def run_rename_tag(db_path: Path | str, curr_name: str, new_name: str) -> None:
    """タグ名を変更してコミットする.

    Raises:
        NotFoundError: curr_name のタグが存在しない場合
        InvalidNameError: new_name が不正な場合
        AlreadyExistsError: new_name のタグが既に存在する場合
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        curr_tag = api.load_existing_tag(tx, curr_name)

        logger.info(f"Renaming tag '{curr_name}' to '{new_name}'")
        rename_tag(tx, curr_tag.id, new_name)


def run_rename_value(db_path: Path | str, curr_name: str, new_name: str) -> None:
    """値名を変更してコミットする."""
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        curr_value = api.load_existing_value(tx, curr_name)

        logger.info(f"Renaming value '{curr_name}' to '{new_name}'")
        rename_value(tx, curr_value.id, new_name)


def rename_tag(tx: Transaction, tag_id: int, new_name: str) -> None:
    """タグ名を変更する（コミットしない）."""
    validate_tag_name(new_name)

    if storage.tag.tag_by_name(tx, new_name) is not None:
        raise AlreadyExistsError("tag", new_name)

    storage.tag.rename_tag(tx, tag_id, new_name)


def rename_value(tx: Transaction, value_id: int, new_name: str) -> None:
    """値名を変更する（コミットしない）."""
    validate_value_name(new_name)

    if storage.value.value_by_name(tx, new_name) is not None:
        raise AlreadyExistsError("value", new_name)

    storage.value.rename_value(tx, value_id, new_name)
