"""paths.py のユニットテスト（CanonicalPath / ScopedPath）."""

import os
from pathlib import Path

import pytest

from file_tag_db.core.exceptions import InvalidPathError, NotFoundError
from file_tag_db.core.paths import CanonicalPath, ScopedPath


def _make_symlink(target: Path, link: Path) -> None:
    if link.is_symlink() or link.exists():
        link.unlink()
    link.symlink_to(target)


def _assert_scoped(root: CanonicalPath, path: Path | str, expected_inner: Path | str) -> None:
    # 正規化は実在するパスに対してのみ行われるため、対象をディレクトリとして作っておく
    (root.path / path).mkdir(parents=True, exist_ok=True)
    assert ScopedPath(root, path).inner == Path(expected_inner)


class TestCanonicalPath:
    """CanonicalPath のテスト."""

    def test_resolves_symlinks(self, root_dir: Path) -> None:
        """シンボリックリンクが解決された絶対パスになること."""
        link = root_dir.parent / "root-link"
        _make_symlink(root_dir, link)

        assert CanonicalPath(link).path == root_dir

    def test_missing_path(self, tmp_path: Path) -> None:
        """存在しないパスは NotFoundError になること."""
        with pytest.raises(NotFoundError):
            CanonicalPath(tmp_path / "missing")

    def test_is_immutable(self, root: CanonicalPath) -> None:
        with pytest.raises(AttributeError):
            root.path = Path("/")  # type: ignore[misc]


class TestScopedPath:
    """ScopedPath 生成のテスト."""

    def test_inside_root_is_relative(self, root: CanonicalPath) -> None:
        """ルート配下は相対パスになること."""
        _assert_scoped(root, "rel", "rel")
        _assert_scoped(root, root.path / "foo" / "bar", "foo/bar")

    def test_outside_root_is_absolute(self, root: CanonicalPath) -> None:
        """ルート外は絶対パスになること."""
        parent = root.path.parent
        (parent / "other").mkdir()
        (parent / "dir").mkdir()

        assert ScopedPath(root, "../other").inner == parent / "other"
        assert ScopedPath(root, "foo/../../other").inner == parent / "other"
        assert ScopedPath(root, parent / "dir").inner == parent / "dir"

    def test_path_clean_up(self, root: CanonicalPath) -> None:
        """`.` / `..` が取り除かれ、ルート自体は `.` になること."""
        assert ScopedPath(root, "./dummy1/.././dummy2/../").inner == Path(".")
        assert ScopedPath(root, "../root/dummy/../").inner == Path(".")
        assert ScopedPath(root, "").inner == Path(".")
        assert ScopedPath(root, root.path).inner == Path(".")

    def test_nonexistent_path_is_cleaned(self, root: CanonicalPath) -> None:
        """存在しないパスも字句的に正規化されること."""
        assert ScopedPath(root, "missing/./x/../file.txt").inner == Path("missing/file.txt")

    def test_symlink_outside_root_relative(self, root: CanonicalPath) -> None:
        """ルート外のシンボリックリンク（相対指定）は解決されること."""
        (root.path / "other").mkdir()
        _make_symlink(root.path, root.path.parent / "symlink-out")

        assert ScopedPath(root, "../symlink-out/other/").inner == Path("other")

    def test_symlink_outside_root_absolute(self, root: CanonicalPath) -> None:
        """ルート外のシンボリックリンク（絶対指定）は解決されること."""
        (root.path / "aa").mkdir()
        symlink_out = root.path.parent / "symlink-out"
        _make_symlink(root.path, symlink_out)

        assert ScopedPath(root, symlink_out / "aa").inner == Path("aa")

    def test_symlink_inside_root_is_kept(self, root: CanonicalPath) -> None:
        """ルート内のシンボリックリンクは解決されず、リンク名が残ること."""
        (root.path / "other" / "aa").mkdir(parents=True)
        _make_symlink(root.path / "other", root.path / "symlink-in")

        assert ScopedPath(root, "symlink-in/aa").inner == Path("symlink-in/aa")
        assert ScopedPath(root, root.path / "symlink-in" / "aa").inner == Path("symlink-in/aa")

    def test_symlink_inside_root_pointing_outside(self, root: CanonicalPath) -> None:
        """ルート内からルート外を指すリンクを辿っても、相対パスのまま保存されること."""
        outside = root.path.parent / "outside"
        outside.mkdir()
        (outside / "x").write_text("data", encoding="utf-8")
        _make_symlink(outside, root.path / "link")

        scoped = ScopedPath(root, root.path / "link" / "x")

        assert scoped.inner == Path("link/x")
        assert Path(os.path.realpath(scoped)) == outside / "x"

    def test_idempotent(self, root: CanonicalPath) -> None:
        """同じ入力を2回解決しても同じ inner になること."""
        (root.path / "a" / "b").mkdir(parents=True)
        _make_symlink(root.path / "a", root.path / "l")

        for path in ["a/b", "l/b", "../root/a", "a/../a/b/", root.path / "l" / "b"]:
            assert ScopedPath(root, path).inner == ScopedPath(root, path).inner
            assert ScopedPath(root, path) == ScopedPath(root, path)

    def test_root_containment(self, root: CanonicalPath) -> None:
        """ルート配下を指すパスは `..` で始まらない相対パスになること."""
        (root.path / "a" / "b").mkdir(parents=True)
        _make_symlink(root.path / "a", root.path.parent / "via")

        for path in ["a", "a/b", "a/../a/b", "../root/a/b", root.path.parent / "via" / "b"]:
            inner = ScopedPath(root, path).inner
            assert not inner.is_absolute()
            assert inner.parts[:1] != ("..",)

    def test_root_is_shared(self, root: CanonicalPath) -> None:
        """派生した ScopedPath が同じルートオブジェクトを共有すること."""
        a = ScopedPath(root, "a")
        b = ScopedPath(root, "b")
        assert a.root is root
        assert b.root is root

    def test_is_within_root(self, root: CanonicalPath) -> None:
        outside = root.path.parent / "elsewhere"
        outside.mkdir()

        assert ScopedPath(root, "a/b").is_within_root()
        assert ScopedPath(root, ".").is_within_root()
        assert not ScopedPath(root, outside).is_within_root()
        assert not ScopedPath(root, "../elsewhere").is_within_root()

    def test_fspath_is_absolute(self, root: CanonicalPath) -> None:
        """os.fspath() は論理的な絶対パスを返すこと."""
        assert os.fspath(ScopedPath(root, "foo")) == str(root.path / "foo")
        outside = root.path.parent / "outside"
        outside.mkdir()
        assert Path(os.fspath(ScopedPath(root, outside))) == outside

    def test_root_must_be_directory(self, root_dir: Path) -> None:
        file_path = root_dir / "file.txt"
        file_path.write_text("x", encoding="utf-8")

        with pytest.raises(InvalidPathError):
            ScopedPath(CanonicalPath(file_path), "a")


class TestInnerAsDirAndName:
    """inner_as_dir_and_name のテスト."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("foo", (".", "foo")),
            ("foo/bar", ("foo", "bar")),
            ("foo/bar/baz", ("foo/bar", "baz")),
            ("foo/bar/baz/", ("foo/bar", "baz")),
        ],
    )
    def test_relative(self, root: CanonicalPath, path: str, expected: tuple[str, str]) -> None:
        assert ScopedPath(root, path).inner_as_dir_and_name() == expected

    def test_absolute(self, root: CanonicalPath) -> None:
        outside = root.path.parent / "foo" / "bar" / "baz"
        outside.mkdir(parents=True)

        assert ScopedPath(root, outside).inner_as_dir_and_name() == (str(outside.parent), "baz")
        assert ScopedPath(root, f"{outside}/").inner_as_dir_and_name() == (str(outside.parent), "baz")

    def test_special_cases(self, root: CanonicalPath) -> None:
        """`.` と `/` は親と名前が同じ値になること."""
        assert ScopedPath(root, ".").inner_as_dir_and_name() == (".", ".")
        assert ScopedPath(root, "/").inner_as_dir_and_name() == ("/", "/")

    def test_trailing_parent_component(self, root: CanonicalPath) -> None:
        """ルート内リンクの後ろに `..` が残るパスは分割できないこと."""
        (root.path / "target").mkdir()
        _make_symlink(root.path / "target", root.path / "link")

        scoped = ScopedPath(root, "link/..")

        assert scoped.inner == Path("link/..")
        with pytest.raises(InvalidPathError):
            scoped.inner_as_dir_and_name()
