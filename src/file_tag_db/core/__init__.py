"""タグストアのコア処理群.

- パスのスコープ化（ユーザー入力パス → ルート相対 / 絶対の保存用表現）
- 含意ルールの推移閉包（明示タグ → 実効タグ）
- エンティティ型と例外
"""

from .exceptions import (
    AlreadyExistsError,
    FileTagDBError,
    IntegrityViolationError,
    InvalidNameError,
    InvalidPathError,
    NotFoundError,
    PathAccessError,
    StoreAccessError,
)
from .implications import EffectiveTag, compute_effective_tags
from .paths import CanonicalPath, ScopedPath

__all__ = [
    "CanonicalPath",
    "ScopedPath",
    "EffectiveTag",
    "compute_effective_tags",
    "FileTagDBError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidNameError",
    "InvalidPathError",
    "IntegrityViolationError",
    "PathAccessError",
    "StoreAccessError",
]
