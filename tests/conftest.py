"""テスト共通フィクスチャ（一時ルートディレクトリと DB）."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from file_tag_db.core.paths import CanonicalPath
from file_tag_db.storage import Storage


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    # tmp_path 自体がシンボリックリンク配下の環境でも比較できるよう正規化しておく
    root = tmp_path.resolve() / "root"
    root.mkdir()
    return root


@pytest.fixture
def root(root_dir: Path) -> CanonicalPath:
    return CanonicalPath(root_dir)


@pytest.fixture
def db_path(root_dir: Path) -> Path:
    """`<root>/.tmsu/db` に空の DB を作成する."""
    path = root_dir / ".tmsu" / "db"
    path.parent.mkdir()
    Storage.create_at(path)
    return path


@pytest.fixture
def store(db_path: Path) -> Iterator[Storage]:
    s = Storage.open(db_path)
    try:
        yield s
    finally:
        s.close()
