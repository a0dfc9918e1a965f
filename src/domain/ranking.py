"""字幕候補のランキング（純粋関数）"""

from dataclasses import dataclass
from typing import Any, Sequence

from src.domain.entities import SubtitleCandidate

TIE_BREAK_FIELDS = ("downloads", "rating", "id")


@dataclass(frozen=True)
class RankingPolicy:
    """
    同一言語・同一ハッシュ一致区分内のタイブレーク順

    fields は "downloads"（降順）/ "rating"（降順、未評価は最後）/ "id"（昇順）
    の並び。順序を全順序にするため "id" は省略されても末尾に付く。
    """

    fields: tuple[str, ...] = TIE_BREAK_FIELDS

    def __post_init__(self) -> None:
        unknown = [f for f in self.fields if f not in TIE_BREAK_FIELDS]
        if unknown:
            raise ValueError(f"unknown tie-break fields: {unknown}")
        if len(set(self.fields)) != len(self.fields):
            raise ValueError("tie-break fields must not repeat")
        if "id" not in self.fields:
            object.__setattr__(self, "fields", (*self.fields, "id"))

    @classmethod
    def from_string(cls, value: str) -> "RankingPolicy":
        """ "rating,downloads" のような設定値から生成"""
        fields = tuple(part.strip().lower() for part in value.split(",") if part.strip())
        return cls(fields=fields or TIE_BREAK_FIELDS)


DEFAULT_POLICY = RankingPolicy()


def _tie_break_key(candidate: SubtitleCandidate, policy: RankingPolicy) -> tuple[Any, ...]:
    key: list[Any] = []
    for name in policy.fields:
        if name == "downloads":
            key.append(-candidate.downloads_count)
        elif name == "rating":
            # 未評価は評価ありの後ろ
            if candidate.rating is None:
                key.append((1, 0.0))
            else:
                key.append((0, -candidate.rating))
        else:
            key.append(candidate.id)
    return tuple(key)


def rank_candidates(
    candidates: Sequence[SubtitleCandidate],
    language_codes: Sequence[str],
    prefer_hash_match: bool = True,
    policy: RankingPolicy = DEFAULT_POLICY,
) -> list[SubtitleCandidate]:
    """
    候補を決定的に並べ替える

    1. 要求言語の優先順（先に指定された言語が優先、要求外の言語は除外。
       language_codes が空なら全言語を同順位とする）
    2. prefer_hash_match なら同一言語内でハッシュ一致を先頭へ
    3. policy に従ったタイブレーク（既定: ダウンロード数↓, 評価↓, id↑）

    Args:
        candidates: 検索結果の候補
        language_codes: 優先順の言語コード
        prefer_hash_match: ハッシュ一致を優先するか
        policy: タイブレーク順

    Returns:
        並べ替え済みの候補リスト
    """
    priority: dict[str, int] = {}
    for code in language_codes:
        if code.strip():
            priority.setdefault(code.strip().lower(), len(priority))

    def sort_key(candidate: SubtitleCandidate) -> tuple[Any, ...]:
        hash_rank = 0 if (prefer_hash_match and candidate.matched_by_hash) else 1
        return (
            priority.get(candidate.language_code.lower(), 0),
            hash_rank,
            _tie_break_key(candidate, policy),
        )

    # 言語指定なし（"all" で検索）なら全言語を1つの区分として扱う
    if priority:
        eligible = [c for c in candidates if c.language_code.lower() in priority]
    else:
        eligible = list(candidates)
    return sorted(eligible, key=sort_key)


def select_best(
    candidates: Sequence[SubtitleCandidate],
    language_codes: Sequence[str],
    prefer_hash_match: bool = True,
    policy: RankingPolicy = DEFAULT_POLICY,
) -> SubtitleCandidate | None:
    """最上位の候補を返す（候補がなければ None）"""
    ranked = rank_candidates(candidates, language_codes, prefer_hash_match, policy)
    return ranked[0] if ranked else None
