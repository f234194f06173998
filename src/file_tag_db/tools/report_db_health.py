"""タグストアの健全性チェックを行い、TSVレポートを出力する。

カスケード削除が守るべき不変条件（孤立ファイルなし、削除済みタグ・値への参照なし、
空の名前なし）を検査します。
"""

from __future__ import annotations

import argparse
import csv
import sqlite3
from collections.abc import Iterable, Sequence
from pathlib import Path


def _write_tsv(path: Path, header: Sequence[str], rows: Iterable[Sequence[object]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(list(header))
        count = 0
        for r in rows:
            writer.writerow(["" if v is None else v for v in r])
            count += 1
    return count


def _fetchall(con: sqlite3.Connection, sql: str, params: Sequence[object] = ()) -> list[sqlite3.Row]:
    cur = con.execute(sql, params)
    return cur.fetchall()


def run_health_checks(db_path: Path, out_dir: Path) -> Path:
    db_path = Path(db_path)
    out_dir = Path(out_dir)
    if not db_path.exists():
        raise FileNotFoundError(db_path)
    out_dir.mkdir(parents=True, exist_ok=True)

    con = sqlite3.connect(db_path)
    try:
        con.row_factory = sqlite3.Row

        quick_check_rows = _fetchall(con, "PRAGMA quick_check;")
        quick_check = "|".join([r[0] for r in quick_check_rows]) if quick_check_rows else ""

        totals = {
            "tags": _fetchall(con, "SELECT COUNT(*) AS n FROM tag;")[0]["n"],
            "values": _fetchall(con, "SELECT COUNT(*) AS n FROM value;")[0]["n"],
            "files": _fetchall(con, "SELECT COUNT(*) AS n FROM file;")[0]["n"],
            "file_tags": _fetchall(con, "SELECT COUNT(*) AS n FROM file_tag;")[0]["n"],
            "implications": _fetchall(con, "SELECT COUNT(*) AS n FROM implication;")[0]["n"],
        }

        # タグが1件も無いファイル（カスケード削除で消えているべき）
        orphan_files = _fetchall(
            con,
            """
            SELECT f.id, f.directory, f.name
            FROM file f
            LEFT JOIN file_tag ft ON ft.file_id = f.id
            WHERE ft.file_id IS NULL
            ORDER BY f.directory, f.name
            """,
        )
        orphan_files_count = _write_tsv(
            out_dir / "orphan_files.tsv",
            ["file_id", "directory", "name"],
            [(r["id"], r["directory"], r["name"]) for r in orphan_files],
        )

        # 存在しない file / tag / value を参照する file_tag（value_id = 0 は値なし）
        dangling_file_tags = _fetchall(
            con,
            """
            SELECT ft.file_id, ft.tag_id, ft.value_id,
                   f.id IS NULL AS missing_file,
                   t.id IS NULL AS missing_tag,
                   (ft.value_id != 0 AND v.id IS NULL) AS missing_value
            FROM file_tag ft
            LEFT JOIN file f ON f.id = ft.file_id
            LEFT JOIN tag t ON t.id = ft.tag_id
            LEFT JOIN value v ON v.id = ft.value_id
            WHERE f.id IS NULL OR t.id IS NULL OR (ft.value_id != 0 AND v.id IS NULL)
            ORDER BY ft.file_id, ft.tag_id, ft.value_id
            """,
        )
        dangling_file_tags_count = _write_tsv(
            out_dir / "dangling_file_tags.tsv",
            ["file_id", "tag_id", "value_id", "missing_file", "missing_tag", "missing_value"],
            [
                (
                    r["file_id"],
                    r["tag_id"],
                    r["value_id"],
                    r["missing_file"],
                    r["missing_tag"],
                    r["missing_value"],
                )
                for r in dangling_file_tags
            ],
        )

        dangling_implications = _fetchall(
            con,
            """
            SELECT i.tag_id, i.value_id, i.implied_tag_id, i.implied_value_id
            FROM implication i
            LEFT JOIN tag t ON t.id = i.tag_id
            LEFT JOIN value v ON v.id = i.value_id
            LEFT JOIN tag it ON it.id = i.implied_tag_id
            LEFT JOIN value iv ON iv.id = i.implied_value_id
            WHERE t.id IS NULL
               OR it.id IS NULL
               OR (i.value_id != 0 AND v.id IS NULL)
               OR (i.implied_value_id != 0 AND iv.id IS NULL)
            ORDER BY i.tag_id, i.value_id, i.implied_tag_id, i.implied_value_id
            """,
        )
        dangling_implications_count = _write_tsv(
            out_dir / "dangling_implications.tsv",
            ["tag_id", "value_id", "implied_tag_id", "implied_value_id"],
            [
                (r["tag_id"], r["value_id"], r["implied_tag_id"], r["implied_value_id"])
                for r in dangling_implications
            ],
        )

        # 空の名前（UNIQUE 制約では防げない）
        empty_names = _fetchall(
            con,
            """
            SELECT 'tag' AS kind, id FROM tag WHERE name = ''
            UNION ALL
            SELECT 'value' AS kind, id FROM value WHERE name = ''
            ORDER BY kind, id
            """,
        )
        empty_names_count = _write_tsv(
            out_dir / "empty_names.tsv",
            ["kind", "id"],
            [(r["kind"], r["id"]) for r in empty_names],
        )

        summary_out = out_dir / "db_health_summary.tsv"
        _write_tsv(
            summary_out,
            ["metric", "value"],
            [
                ("db_path", str(db_path)),
                ("quick_check", quick_check),
                ("total_tags", totals["tags"]),
                ("total_values", totals["values"]),
                ("total_files", totals["files"]),
                ("total_file_tags", totals["file_tags"]),
                ("total_implications", totals["implications"]),
                ("orphan_files", orphan_files_count),
                ("dangling_file_tags", dangling_file_tags_count),
                ("dangling_implications", dangling_implications_count),
                ("empty_names", empty_names_count),
            ],
        )

        return summary_out
    finally:
        con.close()


def main() -> None:
    p = argparse.ArgumentParser(description="Check tag database health and write TSV reports.")
    p.add_argument("--db", type=Path, required=True, help="Path to SQLite DB file")
    p.add_argument("--out-dir", type=Path, required=True, help="Output directory for TSV reports")
    args = p.parse_args()

    summary = run_health_checks(args.db, args.out_dir)
    print(f"Wrote health reports: {summary.parent}")


if __name__ == "__main__":
    main()
