"""ルートディレクトリを基準にしたパスのスコープ化.

ユーザーが指定したパス（相対・絶対、シンボリックリンクを含みうる）を、DB に保存できる
安定した表現（ScopedPath.inner）へ変換します。

- ルート配下を指す場合: ルートからの相対パス
  （ルート内のシンボリックリンクは解決せず、リンク名そのものにタグを付ける）
- ルート外を指す場合: 正規化済みの絶対パス

使用例:
    >>> root = CanonicalPath("/foo/bar")
    >>> ScopedPath(root, "baz").inner
    PosixPath('baz')
    >>> ScopedPath(root, "/foo/bar/baz").inner
    PosixPath('baz')
    >>> ScopedPath(root, "../baz").inner
    PosixPath('/foo/baz')
    >>> ScopedPath(root, "./baz/.././dummy/../").inner
    PosixPath('.')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import InvalidPathError, NotFoundError, PathAccessError


def _canonicalize(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except FileNotFoundError as e:
        raise NotFoundError(f"Path not found: {path}", path) from e
    except (OSError, RuntimeError) as e:
        # RuntimeError: シンボリックリンクのループ（Python < 3.13）
        raise PathAccessError(path, e) from e


def _clean(path: Path) -> Path:
    """ファイルシステムに触れずに `.` / `..` を字句的に取り除く."""
    return Path(os.path.normpath(path))


def _canonicalize_or_clean(path: Path) -> Path:
    if path.exists():
        return _canonicalize(path)
    return _clean(path)


@dataclass(frozen=True, init=False)
class CanonicalPath:
    """存在確認済み・シンボリックリンク解決済みの絶対パス.

    生成後は不変で、同じルートから作られた全ての ScopedPath から共有されます。

    Raises:
        NotFoundError: パスが存在しない場合
        PathAccessError: 権限エラーなどで正規化できない場合
    """

    path: Path

    def __init__(self, path: Path | str) -> None:
        object.__setattr__(self, "path", _canonicalize(Path(path)))

    def is_dir(self) -> bool:
        return self.path.is_dir()

    def __fspath__(self) -> str:
        return os.fspath(self.path)

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True, init=False)
class ScopedPath:
    """ルート（root）を知っている論理的には絶対のパス.

    論理パスがルート配下にあれば inner はルートからの相対パス、そうでなければ
    正規化済みの絶対パスになります。`os.fspath()` は絶対パスを返します。

    Attributes:
        root: 基準ディレクトリ（共有・読み取り専用）
        inner: DB に保存する表現（相対または絶対）
        absolute: 論理的な絶対パス
    """

    root: CanonicalPath
    inner: Path
    absolute: Path

    def __init__(self, root: CanonicalPath, path: Path | str) -> None:
        """ScopedPath を作成する.

        Args:
            root: 既存ディレクトリの CanonicalPath
            path: 対象パス。相対パスはカレントディレクトリではなく root からの相対として扱う

        Raises:
            InvalidPathError: root がディレクトリでない場合
            NotFoundError: 正規化が必要な途中のパスが消えた場合
            PathAccessError: 正規化中のファイルシステムエラー
        """
        if not root.is_dir():
            raise InvalidPathError(f"The root must be a directory: {root}")

        path = Path(path)
        base = root.path
        parts = path.parts

        if path.is_absolute():
            growing = Path(path.anchor)
            parts = parts[1:]
        else:
            growing = base

        # 構成要素を1つずつ growing に追加していく。
        # ルート内のシンボリックリンクに到達したらそこで解決を止める。
        remaining: tuple[str, ...] = ()
        for i, part in enumerate(parts):
            extended = growing / part
            if extended.is_relative_to(base) and extended.is_symlink():
                # ここまでの growing は正規化済み（または clean 済み）で、part は `..` になりえない
                growing = extended
                remaining = parts[i + 1 :]
                break
            growing = _canonicalize_or_clean(extended)

        # 残りの構成要素はリンクを解決せずにそのまま連結する
        growing = growing.joinpath(*remaining)

        absolute = growing if growing.is_absolute() else _clean(base / growing)

        try:
            inner = absolute.relative_to(base)
        except ValueError:
            inner = absolute

        if str(inner) in {"", "."}:
            inner = Path(".")

        object.__setattr__(self, "root", root)
        object.__setattr__(self, "inner", inner)
        object.__setattr__(self, "absolute", absolute)

    def is_within_root(self) -> bool:
        return not self.inner.is_absolute()

    def inner_as_dir_and_name(self) -> tuple[str, str]:
        """inner を (親ディレクトリ, 名前) に分割する.

        `.` と `/` は親と名前が同じ値になる（既存 DB のキーとの互換性のため）。

        Returns:
            (directory, name) のタプル

        Raises:
            InvalidPathError: inner が `..` で終わる場合
        """
        inner = self.inner

        if inner == Path("."):
            return (".", ".")

        if inner.anchor and inner == Path(inner.anchor):
            return (str(inner), str(inner))

        if inner.name == "..":
            raise InvalidPathError(f"Cannot determine the name of '{inner}'")

        return (str(inner.parent), inner.name)

    def __fspath__(self) -> str:
        return os.fspath(self.absolute)

    def __str__(self) -> str:
        return str(self.absolute)
