"""タグ・値の削除（関連レコードのカスケード削除）.

タグ（値）の削除は1つのトランザクション内で以下を行います。

1. そのタグ（値）を参照する file_tag を収集
2. それらの file_tag を削除
3. タグが1件も残らなくなった file を削除
4. そのタグ（値）を含意元・含意先とする implication を削除
5. tag（value）自体を削除（ちょうど1行でなければ IntegrityViolationError）

途中で失敗した場合はトランザクション全体がロールバックされ、部分的な削除は残りません。
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from file_tag_db import api, storage
from file_tag_db.core.entities import FileTag, Tag, Value
from file_tag_db.storage import Storage, Transaction


def run_delete_tags(db_path: Path | str, tag_names: Sequence[str]) -> None:
    """タグを名前で削除する（全件を1トランザクションで処理）.

    Raises:
        NotFoundError: 存在しないタグ名が含まれる場合（何も削除されない）
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        for name in tag_names:
            tag = api.load_existing_tag(tx, name)

            logger.info(f"Deleting tag '{name}'")
            delete_tag(tx, tag)


def run_delete_values(db_path: Path | str, value_names: Sequence[str]) -> None:
    """値を名前で削除する（全件を1トランザクションで処理）."""
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        for name in value_names:
            value = api.load_existing_value(tx, name)

            logger.info(f"Deleting value '{name}'")
            delete_value(tx, value)


def delete_tag(tx: Transaction, tag: Tag) -> None:
    """タグと、それに依存するタグ付け・孤立ファイル・含意ルールを削除する（コミットしない）."""
    _delete_file_tags_by_tag_id(tx, tag)
    removed = storage.implication.delete_implications_by_tag_id(tx, tag.id)
    logger.debug(f"Removed {removed} implication(s) referencing tag '{tag.name}'")
    storage.tag.delete_tag(tx, tag.id)


def delete_value(tx: Transaction, value: Value) -> None:
    """値と、それに依存するタグ付け・孤立ファイル・含意ルールを削除する（コミットしない）."""
    _delete_file_tags_by_value_id(tx, value)
    removed = storage.implication.delete_implications_by_value_id(tx, value.id)
    logger.debug(f"Removed {removed} implication(s) referencing value '{value.name}'")
    storage.value.delete_value(tx, value.id)


def _delete_file_tags_by_tag_id(tx: Transaction, tag: Tag) -> None:
    file_tags = storage.filetag.file_tags_by_tag_id(tx, tag.id)
    storage.filetag.delete_file_tags_by_tag_id(tx, tag.id)
    deleted = storage.file.delete_untagged_files(tx, _extract_file_ids(file_tags))
    logger.debug(f"Removed {len(file_tags)} file tag(s) and {deleted} untagged file(s) for tag '{tag.name}'")


def _delete_file_tags_by_value_id(tx: Transaction, value: Value) -> None:
    file_tags = storage.filetag.file_tags_by_value_id(tx, value.id)
    storage.filetag.delete_file_tags_by_value_id(tx, value.id)
    deleted = storage.file.delete_untagged_files(tx, _extract_file_ids(file_tags))
    logger.debug(
        f"Removed {len(file_tags)} file tag(s) and {deleted} untagged file(s) for value '{value.name}'"
    )


def _extract_file_ids(file_tags: Sequence[FileTag]) -> list[int]:
    return [ft.file_id for ft in file_tags]
