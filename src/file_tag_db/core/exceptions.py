"""タグストアの例外定義.

カスタム例外クラスを定義します。
ストア操作で発生するエラーはすべて FileTagDBError を基底とします。
"""

from __future__ import annotations


class FileTagDBError(Exception):
    """file_tag_db の基底例外."""


class NotFoundError(FileTagDBError):
    """パス、または参照先のエンティティ（タグ・値・ファイル）が存在しない.

    Attributes:
        subject: 見つからなかった対象（パスや名前）
    """

    def __init__(self, message: str, subject: object = None) -> None:
        self.subject = subject
        super().__init__(message)


class AlreadyExistsError(FileTagDBError):
    """リネーム先などの名前が既に使われている."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' already exists")


class InvalidNameError(FileTagDBError, ValueError):
    """タグ名・値名が検証に失敗した."""


class InvalidPathError(FileTagDBError, ValueError):
    """パスを (directory, name) に分割できない."""


class IntegrityViolationError(FileTagDBError):
    """1行だけ変更されるはずの更新が、別の件数に影響した.

    論理的な不整合（バグ）を示すため、囲んでいるトランザクションは必ず破棄されます。

    Attributes:
        expected: 期待した影響行数
        actual: 実際の影響行数
    """

    def __init__(self, message: str, expected: int = 1, actual: int | None = None) -> None:
        self.expected = expected
        self.actual = actual
        if actual is not None:
            message = f"{message} (expected {expected} row(s), affected {actual})"
        super().__init__(message)


class PathAccessError(FileTagDBError):
    """ファイルシステムへのアクセス（正規化・stat 等）に失敗した."""

    def __init__(self, path: object, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not access path '{path}': {cause}")


class StoreAccessError(FileTagDBError):
    """SQLite ストアへのアクセスに失敗した（sqlite3.Error をラップ）."""
