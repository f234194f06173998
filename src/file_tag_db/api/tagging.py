"""パスへのタグ付け・タグ解除.

タグ・値は初回使用時に作成し、file 行はパスに初めてタグを付けた時に作成します。
タグ解除でタグが1件も残らなくなった file 行は同じトランザクション内で削除します。
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from file_tag_db import api, storage
from file_tag_db.core.entities import File, Tag, Value
from file_tag_db.core.exceptions import NotFoundError, PathAccessError
from file_tag_db.core.paths import ScopedPath
from file_tag_db.storage import Storage, Transaction

# (tag 名, value 名 or None)
TagValueNames = tuple[str, str | None]

_CHUNK_SIZE = 1024 * 1024


def fingerprint_file(path: Path) -> str:
    """ファイル内容の SHA-256（ディレクトリは空文字）."""
    if path.is_dir():
        return ""

    digest = hashlib.sha256()
    with open(path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def _stat(path: Path) -> os.stat_result:
    try:
        return path.stat()
    except FileNotFoundError:
        # リンク切れのシンボリックリンクはリンク自体の情報を使う
        try:
            return path.lstat()
        except FileNotFoundError as e:
            raise NotFoundError(f"Path not found: {path}", path) from e
        except OSError as e:
            raise PathAccessError(path, e) from e
    except OSError as e:
        raise PathAccessError(path, e) from e


def _load_or_create_pair(tx: Transaction, names: TagValueNames) -> tuple[Tag, Value | None]:
    # 空文字の値名は「値なし」ではなく不正な名前として扱う
    tag_name, value_name = names
    tag = api.load_or_create_tag(tx, tag_name)
    value = api.load_or_create_value(tx, value_name) if value_name is not None else None
    return (tag, value)


def _load_existing_pair(tx: Transaction, names: TagValueNames) -> tuple[Tag, Value | None]:
    tag_name, value_name = names
    tag = api.load_existing_tag(tx, tag_name)
    value = api.load_existing_value(tx, value_name) if value_name is not None else None
    return (tag, value)


def load_or_create_file(tx: Transaction, scoped_path: ScopedPath) -> File:
    """パスに対応する file 行を取得し、無ければファイル情報を読んで作成する."""
    file = storage.file.file_by_path(tx, scoped_path)
    if file is not None:
        return file

    path = scoped_path.absolute
    st = _stat(path)
    is_dir = path.is_dir()
    try:
        fingerprint = fingerprint_file(path) if path.exists() else ""
    except OSError as e:
        raise PathAccessError(path, e) from e

    if scoped_path.is_within_root():
        logger.info(f"New file '{scoped_path.inner}'")
    else:
        logger.warning(f"New file '{scoped_path.inner}' is outside the root {scoped_path.root}")
    return storage.file.insert_file(
        tx,
        scoped_path,
        fingerprint=fingerprint,
        mod_time=datetime.fromtimestamp(st.st_mtime, tz=UTC).astimezone(),
        size=0 if is_dir else st.st_size,
        is_dir=is_dir,
    )


def tag_paths(
    db_path: Path | str,
    paths: Sequence[Path | str],
    tag_value_names: Sequence[TagValueNames],
) -> None:
    """パスにタグ（値付き可）を付けてコミットする.

    Args:
        db_path: DB ファイルパス
        paths: 対象パス（相対パスはルートからの相対）
        tag_value_names: (タグ名, 値名 or None) のリスト

    Raises:
        InvalidNameError: 新規作成するタグ名・値名が不正な場合
        NotFoundError: パスが存在しない場合
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        pairs = [_load_or_create_pair(tx, names) for names in tag_value_names]

        for path in paths:
            scoped_path = ScopedPath(store.root, path)
            file = load_or_create_file(tx, scoped_path)

            for tag, value in pairs:
                logger.info(f"Applying tag '{tag.name}' to '{scoped_path.inner}'")
                storage.filetag.add_file_tag(tx, file.id, tag.id, value.id if value is not None else None)


def untag_paths(
    db_path: Path | str,
    paths: Sequence[Path | str],
    tag_value_names: Sequence[TagValueNames],
) -> None:
    """パスからタグを外してコミットする.

    Raises:
        NotFoundError: パスが未登録、タグ・値が存在しない、またはそのタグ付けが無い場合
    """
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        pairs = [_load_existing_pair(tx, names) for names in tag_value_names]

        for path in paths:
            scoped_path = ScopedPath(store.root, path)
            file = storage.file.file_by_path(tx, scoped_path)
            if file is None:
                raise NotFoundError(f"File '{path}' is not tagged", path)

            existing = {ft.to_tag_id_value_id_pair() for ft in storage.filetag.file_tags_by_file_id(tx, file.id)}
            for tag, value in pairs:
                value_id = value.id if value is not None else None
                if (tag.id, value_id) not in existing:
                    label = tag.name if value is None else f"{tag.name}={value.name}"
                    raise NotFoundError(f"File '{path}' is not tagged '{label}'", path)

                logger.info(f"Removing tag '{tag.name}' from '{scoped_path.inner}'")
                storage.filetag.delete_file_tag(tx, file.id, tag.id, value_id)
                existing.discard((tag.id, value_id))

            storage.file.delete_untagged_files(tx, [file.id])
