"""含意ルールの追加・削除・一覧."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from file_tag_db import api, storage
from file_tag_db.core.entities import Implication
from file_tag_db.core.exceptions import NotFoundError
from file_tag_db.storage import Storage

# (tag 名, value 名 or None)
TagValueNames = tuple[str, str | None]


def _label(names: TagValueNames) -> str:
    tag_name, value_name = names
    return tag_name if value_name is None else f"{tag_name}={value_name}"


def add_implication_by_names(db_path: Path | str, source: TagValueNames, implied: TagValueNames) -> None:
    """source を持つファイルは implied も持つ、という含意ルールを追加する.

    タグ・値が存在しない場合は作成します。既に同じルールがあれば何もしません。
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        tag = api.load_or_create_tag(tx, source[0])
        value = api.load_or_create_value(tx, source[1]) if source[1] is not None else None
        implied_tag = api.load_or_create_tag(tx, implied[0])
        implied_value = api.load_or_create_value(tx, implied[1]) if implied[1] is not None else None

        logger.info(f"Adding implication '{_label(source)}' -> '{_label(implied)}'")
        storage.implication.add_implication(
            tx,
            tag.id,
            value.id if value is not None else None,
            implied_tag.id,
            implied_value.id if implied_value is not None else None,
        )


def remove_implication_by_names(db_path: Path | str, source: TagValueNames, implied: TagValueNames) -> None:
    """含意ルールを削除する.

    Raises:
        NotFoundError: タグ・値、またはルール自体が存在しない場合
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        tag = api.load_existing_tag(tx, source[0])
        value = api.load_existing_value(tx, source[1]) if source[1] is not None else None
        implied_tag = api.load_existing_tag(tx, implied[0])
        implied_value = api.load_existing_value(tx, implied[1]) if implied[1] is not None else None

        value_id = value.id if value is not None else None
        implied_value_id = implied_value.id if implied_value is not None else None

        existing = storage.implication.implications_for(tx, [(tag.id, value_id)])
        if not any(
            i.value == value and i.implied_tag.id == implied_tag.id and i.implied_value == implied_value
            for i in existing
        ):
            raise NotFoundError(f"No such implication '{_label(source)}' -> '{_label(implied)}'")

        logger.info(f"Removing implication '{_label(source)}' -> '{_label(implied)}'")
        storage.implication.delete_implication(tx, tag.id, value_id, implied_tag.id, implied_value_id)


def list_implications(db_path: Path | str) -> list[Implication]:
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        logger.info("Retrieving implications")
        return storage.implication.implications(tx)
