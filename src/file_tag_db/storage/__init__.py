"""タグストアの永続化層.

- Storage / Transaction: SQLite 接続とトランザクション
- tag / value / file / filetag / implication: エンティティごとの CRUD

DB 上の value_id = 0（値なし）と None の相互変換はこのパッケージ内だけで行います。
"""

from . import file, filetag, implication, tag, value
from .transaction import NO_VALUE_ID, Storage, Transaction

__all__ = [
    "Storage",
    "Transaction",
    "NO_VALUE_ID",
    "file",
    "filetag",
    "implication",
    "tag",
    "value",
]
