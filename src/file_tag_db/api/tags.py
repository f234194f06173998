"""タグ・値一覧の取得.

- 全タグ・全値
- 値ごとのタグ（その値と組み合わせて使われているタグ）
- パスごとのタグ（明示タグ + 含意タグ、explicit / implicit 付き）
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from file_tag_db import api, storage
from file_tag_db.core.entities import Tag, Value
from file_tag_db.core.exceptions import NotFoundError
from file_tag_db.core.implications import EffectiveTag, compute_effective_tags, pair_key
from file_tag_db.core.paths import ScopedPath
from file_tag_db.storage import Storage, Transaction


@dataclass
class ValueTagGroup:
    """タグ名のグループ。value_name がある場合、その値と組み合わされたタグ."""

    value_name: str | None
    tag_names: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TagData:
    tag_name: str
    value_name: str | None
    explicit: bool
    implicit: bool


@dataclass
class FileTagGroup:
    path: Path
    tags: list[TagData] = field(default_factory=list)


def list_all_tags(db_path: Path | str) -> list[ValueTagGroup]:
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        logger.info("Retrieving all tags")
        tag_names = [t.name for t in storage.tag.tags(tx)]

    return [ValueTagGroup(value_name=None, tag_names=tag_names)]


def list_all_values(db_path: Path | str) -> list[str]:
    """全ての値名を名前順で返す."""
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        logger.info("Retrieving all values")
        return [v.name for v in storage.value.values(tx)]


def list_tags_for_values(db_path: Path | str, value_names: Sequence[str]) -> list[ValueTagGroup]:
    """値ごとに、その値と組み合わせて使われているタグ名を返す.

    value_names が空の場合は list_all_tags() と同じ結果になります。

    Raises:
        NotFoundError: 存在しない値名が含まれる場合
    """
    if not value_names:
        return list_all_tags(db_path)

    tag_groups: list[ValueTagGroup] = []
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        for value_name in value_names:
            logger.info(f"Looking up value '{value_name}'")
            value = api.load_existing_value(tx, value_name)

            logger.info(f"Retrieving tags for value '{value_name}'")
            tag_groups.append(
                ValueTagGroup(value_name=value_name, tag_names=_tag_names_by_value_id(tx, value.id))
            )

    return tag_groups


def _tag_names_by_value_id(tx: Transaction, value_id: int) -> list[str]:
    tag_names: set[str] = set()
    for file_tag in storage.filetag.file_tags_by_value_id(tx, value_id):
        tag_names.add(_load_tag(tx, file_tag.tag_id).name)
    return sorted(tag_names)


def list_tags_for_paths(
    db_path: Path | str,
    paths: Sequence[Path | str],
    *,
    follow_symlinks: bool = False,
    explicit_only: bool = False,
) -> list[FileTagGroup]:
    """パスごとの実効タグを返す.

    Args:
        db_path: DB ファイルパス
        paths: 対象パス（相対パスはルートからの相対）
        follow_symlinks: True の場合、パスをシンボリックリンク解決してから検索する
        explicit_only: True の場合、含意のみのタグを除外する

    Returns:
        DB に登録されているパスの FileTagGroup（未登録のパスは含まれない）
    """
    tag_groups: list[FileTagGroup] = []
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        for path in paths:
            path = Path(path)
            if follow_symlinks:
                logger.info(f"Resolving path '{path}'")
                path = (store.root.path / path).resolve()

            logger.info(f"Looking up file '{path}'")
            scoped_path = ScopedPath(store.root, path)
            file = storage.file.file_by_path(tx, scoped_path)
            if file is None:
                logger.debug(f"File '{path}' is not tagged")
                continue

            logger.info("Retrieving tags")
            tags = [
                TagData(
                    tag_name=e.tag.name,
                    value_name=e.value.name if e.value is not None else None,
                    explicit=e.explicit,
                    implicit=e.implicit,
                )
                for e in effective_tags_for_file(tx, file.id)
                if e.explicit or not explicit_only
            ]
            tag_groups.append(FileTagGroup(path=path, tags=tags))

    return tag_groups


def effective_tags_for_file(tx: Transaction, file_id: int) -> list[EffectiveTag]:
    """ファイルの明示タグに含意ルールを適用した実効タグを返す（タグ名順）."""
    explicit_pairs: list[tuple[Tag, Value | None]] = []
    for file_tag in storage.filetag.file_tags_by_file_id(tx, file_id):
        tag = _load_tag(tx, file_tag.tag_id)
        value = _load_value(tx, file_tag.value_id) if file_tag.value_id is not None else None
        explicit_pairs.append((tag, value))

    def lookup(tag: Tag, value: Value | None):
        return storage.implication.implications_for(tx, [pair_key(tag, value)])

    return compute_effective_tags(explicit_pairs, lookup)


def _load_tag(tx: Transaction, tag_id: int) -> Tag:
    tag = storage.tag.tag_by_id(tx, tag_id)
    if tag is None:
        raise NotFoundError(f"tag '{tag_id}' does not exist", tag_id)
    return tag


def _load_value(tx: Transaction, value_id: int) -> Value:
    value = storage.value.value_by_id(tx, value_id)
    if value is None:
        raise NotFoundError(f"value '{value_id}' does not exist", value_id)
    return value
