"""SQLiteデータベース作成ユーティリティ.

タグストア用の SQLite 作成、スキーマ作成、接続ごとの PRAGMA 設定を提供します。

注意:
    foreign_keys は接続単位の設定です。DBファイルに永続化されないため、
    接続を開くたびに apply_connection_pragmas() を呼ぶ必要があります。
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from loguru import logger

# DBファイルに永続化される PRAGMA（作成時に1回だけ適用）
PERSISTENT_PRAGMAS = [
    "PRAGMA journal_mode = WAL;",
]
# 接続ごとに適用が必要な PRAGMA
CONNECTION_PRAGMAS = [
    "PRAGMA foreign_keys = ON;",
]

REQUIRED_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_file_tag_file_id ON file_tag(file_id);",
    "CREATE INDEX IF NOT EXISTS idx_file_tag_tag_id ON file_tag(tag_id);",
    "CREATE INDEX IF NOT EXISTS idx_file_tag_value_id ON file_tag(value_id);",
    "CREATE INDEX IF NOT EXISTS idx_implication_tag_id ON implication(tag_id);",
    "CREATE INDEX IF NOT EXISTS idx_implication_implied_tag_id ON implication(implied_tag_id);",
]

# value_id = 0 は「値なし」を表すため、value への外部キーは張らない
SCHEMA_SQL = [
    """
    CREATE TABLE IF NOT EXISTS tag (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        CONSTRAINT con_tag_name UNIQUE (name)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS value (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        CONSTRAINT con_value_name UNIQUE (name)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS file (
        id INTEGER PRIMARY KEY,
        directory TEXT NOT NULL,
        name TEXT NOT NULL,
        fingerprint TEXT NOT NULL,
        mod_time DATETIME NOT NULL,
        size INTEGER NOT NULL,
        is_dir BOOLEAN NOT NULL,
        CONSTRAINT con_file_path UNIQUE (directory, name)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS file_tag (
        file_id INTEGER NOT NULL,
        tag_id INTEGER NOT NULL,
        value_id INTEGER NOT NULL,
        PRIMARY KEY (file_id, tag_id, value_id),
        FOREIGN KEY (file_id) REFERENCES file(id),
        FOREIGN KEY (tag_id) REFERENCES tag(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS implication (
        tag_id INTEGER NOT NULL,
        value_id INTEGER NOT NULL,
        implied_tag_id INTEGER NOT NULL,
        implied_value_id INTEGER NOT NULL,
        PRIMARY KEY (tag_id, value_id, implied_tag_id, implied_value_id),
        FOREIGN KEY (tag_id) REFERENCES tag(id),
        FOREIGN KEY (implied_tag_id) REFERENCES tag(id)
    );
    """,
]


def apply_connection_pragmas(conn: sqlite3.Connection) -> None:
    """接続ごとに適用が必要な PRAGMA を設定する。"""
    for pragma in CONNECTION_PRAGMAS:
        conn.execute(pragma)


def create_schema(conn: sqlite3.Connection) -> None:
    """テーブルとインデックスを作成する（既存なら何もしない）."""
    for stmt in SCHEMA_SQL:
        conn.executescript(stmt)
    for index_sql in REQUIRED_INDEXES:
        conn.execute(index_sql)


def create_database(db_path: Path | str) -> None:
    """データベースファイルを新規作成する.

    Args:
        db_path: 作成するデータベースファイルパス

    Note:
        親ディレクトリは作成しません（存在しない場合は sqlite3 がエラーになります）。
    """
    db_path = Path(db_path)

    if db_path.exists():
        logger.warning(f"Database already exists: {db_path}")
        return

    logger.info(f"Creating database at {db_path}")

    conn = sqlite3.connect(db_path)
    try:
        for pragma in PERSISTENT_PRAGMAS:
            conn.execute(pragma)
            logger.debug(f"Applied: {pragma}")

        create_schema(conn)

        conn.commit()
        logger.info("Database created successfully")

    except Exception as e:
        logger.error(f"Failed to create database: {e}")
        raise
    finally:
        conn.close()
