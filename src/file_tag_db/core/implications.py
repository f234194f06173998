"""タグ含意（implication）の推移閉包.

ファイルに明示的に付けられた (tag, value?) の組と含意ルールから、実効的なタグ集合
（明示 ∪ 含意）を計算します。

- ノード: (tag_id, value_id または None)
- 作業キューと処理済み集合（seen）を出力とは分けて持つため、循環・自己ループでも停止する
- explicit / implicit は読み出し時の派生情報で、DB へは書き戻さない
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .entities import Implication, Tag, Value

TagValuePair = tuple[Tag, Value | None]
PairKey = tuple[int, int | None]

# (tag, value?) を受け取り、その組を含意元とする Implication を返す
ImplicationLookup = Callable[[Tag, Value | None], Iterable[Implication]]


@dataclass(frozen=True)
class EffectiveTag:
    """ファイルの実効タグ1件（読み取り専用の射影）."""

    tag: Tag
    value: Value | None
    explicit: bool
    implicit: bool


def pair_key(tag: Tag, value: Value | None) -> PairKey:
    return (tag.id, value.id if value is not None else None)


def implication_applies(implication: Implication, tag: Tag, value: Value | None) -> bool:
    """含意ルールが (tag, value?) に適用されるか判定する.

    含意元に値が無いルールはタグの値に関係なく適用され、値があるルールは
    値が一致する場合のみ適用されます。
    """
    if implication.tag.id != tag.id:
        return False
    if implication.value is None:
        return True
    return value is not None and implication.value.id == value.id


def compute_effective_tags(
    explicit_pairs: Iterable[TagValuePair],
    implication_lookup: ImplicationLookup,
) -> list[EffectiveTag]:
    """明示タグと含意ルールから実効タグを計算する.

    Args:
        explicit_pairs: ファイルに明示的に付けられた (Tag, Value | None) の組
        implication_lookup: (tag, value) を含意元とする Implication を返す関数

    Returns:
        タグ名でソートされた EffectiveTag のリスト

    Examples:
        >>> mp3, audio = Tag(1, "mp3"), Tag(2, "audio")
        >>> rules = [Implication(mp3, None, audio, None)]
        >>> lookup = lambda t, v: [r for r in rules if implication_applies(r, t, v)]
        >>> [(e.tag.name, e.explicit, e.implicit) for e in compute_effective_tags([(mp3, None)], lookup)]
        [('audio', False, True), ('mp3', True, False)]
    """
    # 出力（キー → [tag, value, explicit, implicit]）
    results: dict[PairKey, list] = {}
    queue: deque[TagValuePair] = deque()
    seen: set[PairKey] = set()

    for tag, value in explicit_pairs:
        key = pair_key(tag, value)
        if key in results:
            continue
        results[key] = [tag, value, True, False]
        queue.append((tag, value))
        seen.add(key)

    while queue:
        tag, value = queue.popleft()

        for implication in implication_lookup(tag, value):
            implied_key = pair_key(implication.implied_tag, implication.implied_value)

            existing = results.get(implied_key)
            if existing is not None:
                existing[3] = True
            else:
                results[implied_key] = [implication.implied_tag, implication.implied_value, False, True]

            if implied_key not in seen:
                seen.add(implied_key)
                queue.append((implication.implied_tag, implication.implied_value))

    effective = [
        EffectiveTag(tag=tag, value=value, explicit=explicit, implicit=implicit)
        for tag, value, explicit, implicit in results.values()
    ]
    effective.sort(key=lambda e: (e.tag.name, e.value.name if e.value is not None else ""))
    return effective
