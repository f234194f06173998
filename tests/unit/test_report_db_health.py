"""report_db_health ツールのテスト."""

import sqlite3
from pathlib import Path

import polars as pl
import pytest

from file_tag_db.api.tagging import tag_paths
from file_tag_db.tools.report_db_health import run_health_checks


def _summary(path: Path) -> dict[str, str]:
    df = pl.read_csv(path, separator="\t", infer_schema=False)
    return dict(zip(df["metric"].to_list(), df["value"].to_list(), strict=True))


def test_healthy_database(db_path: Path, root_dir: Path, tmp_path: Path) -> None:
    (root_dir / "a.txt").write_text("a", encoding="utf-8")
    tag_paths(db_path, ["a.txt"], [("music", None), ("year", "2009")])

    summary = _summary(run_health_checks(db_path, tmp_path / "report"))

    assert summary["quick_check"] == "ok"
    assert summary["total_files"] == "1"
    assert summary["total_file_tags"] == "2"
    assert summary["orphan_files"] == "0"
    assert summary["dangling_file_tags"] == "0"
    assert summary["dangling_implications"] == "0"


def test_detects_broken_rows(db_path: Path, tmp_path: Path) -> None:
    """外部キー検査を通さずに書き込まれた不整合が検出されること."""
    conn = sqlite3.connect(db_path)
    conn.execute(
        "INSERT INTO file (directory, name, fingerprint, mod_time, size, is_dir) "
        "VALUES ('.', 'orphan.txt', '', '2024-01-01 00:00:00+00:00', 0, 0)"
    )
    conn.execute("INSERT INTO tag (name) VALUES ('a')")
    conn.execute("INSERT INTO file_tag VALUES (42, 1, 0)")
    conn.execute("INSERT INTO implication VALUES (1, 7, 1, 0)")
    conn.commit()
    conn.close()

    out_dir = tmp_path / "report"
    summary = _summary(run_health_checks(db_path, out_dir))

    assert summary["orphan_files"] == "1"
    assert summary["dangling_file_tags"] == "1"
    assert summary["dangling_implications"] == "1"

    orphans = pl.read_csv(out_dir / "orphan_files.tsv", separator="\t")
    assert orphans["name"].to_list() == ["orphan.txt"]


def test_missing_database(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        run_health_checks(tmp_path / "missing.db", tmp_path / "report")
