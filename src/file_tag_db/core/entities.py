"""タグストアのエンティティ型.

DB の各テーブル（tag / value / file / file_tag / implication）に対応する値オブジェクトと、
タグ名・値名の検証関数を提供します。

設計方針:
    - 「値なし」は常に None で表す（DB 上の value_id = 0 は storage 層でのみ扱う）
    - explicit / implicit は保存しない派生情報なので FileTag には持たせない
      （implications.EffectiveTag を参照）
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .exceptions import InvalidNameError

# クエリ言語の演算子と衝突するため、タグ名・値名として使えない単語
RESERVED_NAMES = frozenset({"and", "or", "not", "eq", "ne", "lt", "gt", "le", "ge"})

# パス区切り・tag=value 区切り・クエリの括弧
RESERVED_CHARACTERS = frozenset("/\\=()")


@dataclass(frozen=True)
class Tag:
    id: int
    name: str


@dataclass(frozen=True)
class Value:
    id: int
    name: str


@dataclass(frozen=True)
class File:
    """タグ付けされたファイル（またはディレクトリ）.

    (directory, name) は ScopedPath.inner_as_dir_and_name() から得たキーです。
    """

    id: int
    directory: str
    name: str
    fingerprint: str
    mod_time: datetime
    size: int
    is_dir: bool


@dataclass(frozen=True)
class FileTag:
    """ファイルへの明示的なタグ付け1件.

    自然キーは (file_id, tag_id, value_id) で、value_id が None の場合は「値なし」です。
    """

    file_id: int
    tag_id: int
    value_id: int | None = None

    def to_tag_id_value_id_pair(self) -> tuple[int, int | None]:
        return (self.tag_id, self.value_id)


@dataclass(frozen=True)
class Implication:
    """(tag, value?) → (implied_tag, implied_value?) の有向辺.

    自己ループや循環も構造上は許容されます。
    """

    tag: Tag
    value: Value | None
    implied_tag: Tag
    implied_value: Value | None


@dataclass(frozen=True)
class TagFileCount:
    id: int
    name: str
    file_count: int


def _validate_name(kind: str, name: str) -> None:
    if not name:
        raise InvalidNameError(f"{kind} name cannot be empty")

    if name in {".", ".."}:
        raise InvalidNameError(f"{kind} name cannot be '{name}'")

    bad = sorted({ch for ch in name if ch in RESERVED_CHARACTERS})
    if bad:
        raise InvalidNameError(f"{kind} name '{name}' contains reserved character(s): {' '.join(bad)}")

    if name.lower() in RESERVED_NAMES:
        raise InvalidNameError(f"{kind} name '{name}' is a reserved word")

    if any(not ch.isprintable() for ch in name):
        raise InvalidNameError(f"{kind} name '{name}' contains non-printable characters")


def validate_tag_name(name: str) -> None:
    """タグ名を検証する.

    Raises:
        InvalidNameError: 空文字、予約文字（/ \\ = ( )）、予約語を含む場合
    """
    _validate_name("tag", name)


def validate_value_name(name: str) -> None:
    """値名を検証する（規則はタグ名と同じ）."""
    _validate_name("value", name)
