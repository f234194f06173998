"""タグごとの使用数（タグ付けされたファイル数）を TSV / Parquet で出力する。"""

from __future__ import annotations

import argparse
from pathlib import Path

import polars as pl
from loguru import logger

from file_tag_db import storage
from file_tag_db.core.config import locate_db
from file_tag_db.storage import Storage

USAGE_SCHEMA = {"tag_id": pl.Int64, "tag": pl.String, "file_count": pl.Int64}


def tag_usage_frame(db_path: Path | str) -> pl.DataFrame:
    """タグ使用数を DataFrame（tag_id, tag, file_count）で返す（タグ名順）."""
    with Storage.open(db_path) as store, store.begin_transaction() as tx:
        usage = storage.tag.tag_usage(tx)

    return pl.DataFrame(
        {
            "tag_id": [u.id for u in usage],
            "tag": [u.name for u in usage],
            "file_count": [u.file_count for u in usage],
        },
        schema=USAGE_SCHEMA,
    )


def export_tag_usage(db_path: Path | str, output_path: Path | str) -> Path:
    """タグ使用数をファイルへ出力する.

    Args:
        db_path: DB ファイルパス
        output_path: 出力先（拡張子 .parquet なら Parquet、それ以外は TSV）

    Returns:
        出力したファイルのパス
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = tag_usage_frame(db_path)

    if output_path.suffix == ".parquet":
        df.write_parquet(output_path)
    else:
        df.write_csv(output_path, separator="\t")

    logger.info(f"Exported usage of {len(df)} tags → {output_path.name}")
    return output_path


def main() -> None:
    parser = argparse.ArgumentParser(description="Export per-tag file counts as TSV or Parquet.")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite DB path (default: $TMSU_DB, then the nearest .tmsu/db)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Output file (.parquet for Parquet, anything else for TSV)",
    )
    args = parser.parse_args()

    export_tag_usage(locate_db(args.db), args.output)


if __name__ == "__main__":
    main()
