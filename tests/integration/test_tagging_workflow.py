"""Integration tests for the tagging workflow.

Tags files under a temporary root, applies implications, and checks that
listing, untagging, deleting and renaming keep the store consistent.
"""

from pathlib import Path

import pytest

from file_tag_db.api.delete import run_delete_tags
from file_tag_db.api.imply import add_implication_by_names, list_implications, remove_implication_by_names
from file_tag_db.api.rename import run_rename_tag
from file_tag_db.api.tagging import tag_paths, untag_paths
from file_tag_db.api.tags import TagData, list_tags_for_paths, list_tags_for_values
from file_tag_db.core.exceptions import NotFoundError
from file_tag_db.tools.report_db_health import run_health_checks


@pytest.fixture
def music_db(db_path: Path, root_dir: Path) -> Path:
    """a/b.txt に music と mp3、mp3 → audio の含意を持つ DB."""
    (root_dir / "a").mkdir()
    (root_dir / "a" / "b.txt").write_text("la la la", encoding="utf-8")
    tag_paths(db_path, ["a/b.txt"], [("music", None), ("mp3", None)])
    add_implication_by_names(db_path, ("mp3", None), ("audio", None))
    return db_path


def _tags(db_path: Path, path, **kwargs) -> list[TagData]:
    groups = list_tags_for_paths(db_path, [path], **kwargs)
    return groups[0].tags if groups else []


@pytest.mark.integration
class TestTaggingWorkflow:
    """タグ付けから削除までの統合テスト."""

    def test_implied_tags_listed(self, music_db: Path) -> None:
        """含意タグが implicit として一覧に含まれること."""
        assert _tags(music_db, "a/b.txt") == [
            TagData("audio", None, explicit=False, implicit=True),
            TagData("mp3", None, explicit=True, implicit=False),
            TagData("music", None, explicit=True, implicit=False),
        ]

    def test_explicit_only(self, music_db: Path) -> None:
        assert [t.tag_name for t in _tags(music_db, "a/b.txt", explicit_only=True)] == ["mp3", "music"]

    def test_absolute_and_relative_paths_match(self, music_db: Path, root_dir: Path) -> None:
        """絶対パスでも相対パスでも同じファイルとして扱われること."""
        assert _tags(music_db, root_dir / "a" / "b.txt") == _tags(music_db, "a/b.txt")
        assert _tags(music_db, "a/./x/../b.txt") == _tags(music_db, "a/b.txt")

    def test_delete_tag_keeps_file_with_remaining_tags(self, music_db: Path, tmp_path: Path) -> None:
        """mp3 を削除すると含意も消え、music が残るファイルは削除されないこと."""
        run_delete_tags(music_db, ["mp3"])

        assert _tags(music_db, "a/b.txt") == [TagData("music", None, explicit=True, implicit=False)]
        assert list_implications(music_db) == []

        summary = run_health_checks(music_db, tmp_path / "report").read_text(encoding="utf-8")
        assert "orphan_files\t0" in summary

    def test_untag_removes_orphan_file(self, music_db: Path) -> None:
        untag_paths(music_db, ["a/b.txt"], [("music", None)])
        assert [t.tag_name for t in _tags(music_db, "a/b.txt")] == ["audio", "mp3"]

        untag_paths(music_db, ["a/b.txt"], [("mp3", None)])
        assert list_tags_for_paths(music_db, ["a/b.txt"]) == []

        with pytest.raises(NotFoundError, match="is not tagged"):
            untag_paths(music_db, ["a/b.txt"], [("mp3", None)])

    def test_untag_missing_tagging(self, music_db: Path) -> None:
        with pytest.raises(NotFoundError, match="is not tagged 'audio'"):
            untag_paths(music_db, ["a/b.txt"], [("audio", None)])

    def test_rename_is_visible_in_implications(self, music_db: Path) -> None:
        run_rename_tag(music_db, "audio", "sound")

        assert [t.tag_name for t in _tags(music_db, "a/b.txt")] == ["mp3", "music", "sound"]

    def test_remove_implication(self, music_db: Path) -> None:
        remove_implication_by_names(music_db, ("mp3", None), ("audio", None))
        assert [t.tag_name for t in _tags(music_db, "a/b.txt")] == ["mp3", "music"]

        with pytest.raises(NotFoundError, match="No such implication"):
            remove_implication_by_names(music_db, ("mp3", None), ("audio", None))


@pytest.mark.integration
class TestValuesAndDirectories:
    def test_valued_implication_chain(self, db_path: Path, root_dir: Path) -> None:
        """値付きの含意が連鎖し、値が一致しない場合は適用されないこと."""
        (root_dir / "old.flac").write_text("old", encoding="utf-8")
        (root_dir / "new.flac").write_text("new", encoding="utf-8")
        tag_paths(db_path, ["old.flac"], [("year", "2009")])
        tag_paths(db_path, ["new.flac"], [("year", "2015")])
        add_implication_by_names(db_path, ("year", "2009"), ("decade", "2000s"))
        add_implication_by_names(db_path, ("decade", "2000s"), ("era", None))

        assert [(t.tag_name, t.value_name, t.implicit) for t in _tags(db_path, "old.flac")] == [
            ("decade", "2000s", True),
            ("era", None, True),
            ("year", "2009", False),
        ]
        assert [(t.tag_name, t.value_name) for t in _tags(db_path, "new.flac")] == [("year", "2015")]

        groups = list_tags_for_values(db_path, ["2009", "2015"])
        assert [(g.value_name, g.tag_names) for g in groups] == [("2009", ["year"]), ("2015", ["year"])]

    def test_directory_and_symlink_inside_root(self, db_path: Path, root_dir: Path) -> None:
        """ディレクトリにもタグを付けられ、ルート内リンク経由のパスは別のファイルとして扱われること."""
        (root_dir / "photos" / "2009").mkdir(parents=True)
        (root_dir / "latest").symlink_to(root_dir / "photos" / "2009")
        tag_paths(db_path, ["photos/2009"], [("album", None)])

        assert [t.tag_name for t in _tags(db_path, "photos/2009")] == ["album"]
        assert list_tags_for_paths(db_path, ["latest"]) == []
        assert [t.tag_name for t in _tags(db_path, "latest", follow_symlinks=True)] == ["album"]

    def test_unknown_value_listing(self, db_path: Path) -> None:
        with pytest.raises(NotFoundError, match="no such value"):
            list_tags_for_values(db_path, ["nope"])
