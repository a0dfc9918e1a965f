"""OpenSubtitles XML-RPC 字幕検索クライアント"""

from typing import Any, Iterable

from src.domain.entities import MediaFingerprint, Session, SubtitleCandidate
from src.domain.exceptions import ProtocolError
from src.infrastructure.logging_config import LogContext, get_logger
from src.infrastructure.rpc_session import RpcSession

logger = get_logger(__name__)

REQUIRED_FIELDS = ("IDSubtitleFile", "SubLanguageID", "SubFormat", "SubDownloadLink")


class OpenSubtitlesSearchClient:
    """SearchSubtitles を呼び出し、結果を SubtitleCandidate に変換する"""

    def __init__(self, rpc: RpcSession):
        self.rpc = rpc

    def search(
        self,
        session: Session,
        fingerprint: MediaFingerprint,
        language_codes: Iterable[str],
    ) -> list[SubtitleCandidate]:
        """
        指紋と言語で字幕を検索

        全言語をまとめて1回のクエリで問い合わせる。

        Args:
            session: ログイン済みセッション
            fingerprint: 動画ファイルの指紋
            language_codes: 言語コード（ISO 639-2、例: "eng", "pol"）

        Returns:
            候補リスト（要求外の言語は除外、0件なら空リスト）

        Raises:
            ProtocolError: レスポンス形式が不正
            RpcError: リモートがエラーを返した
        """
        languages = sorted({code.strip().lower() for code in language_codes if code.strip()})
        criteria = {
            "moviehash": fingerprint.hex,
            "moviebytesize": str(fingerprint.size_bytes),
            "sublanguageid": ",".join(languages) if languages else "all",
        }
        ctx = LogContext(hash=fingerprint.hex, size=fingerprint.size_bytes, languages=languages)
        logger.info(f"[検索] 開始: {ctx}")

        response = self.rpc.call(session, "SearchSubtitles", ([criteria],))
        candidates = parse_candidates(response.data, fingerprint)

        if languages:
            wanted = set(languages)
            dropped = [c for c in candidates if c.language_code.lower() not in wanted]
            if dropped:
                logger.debug(f"  要求外の言語を除外: {len(dropped)}件")
            candidates = [c for c in candidates if c.language_code.lower() in wanted]

        logger.info(f"[検索] 完了: {len(candidates)}件")
        return candidates


def parse_candidates(data: Any, fingerprint: MediaFingerprint) -> list[SubtitleCandidate]:
    """
    SearchSubtitles の data 部分を検証して変換

    0件の場合サーバーは False や空配列を返す。

    Raises:
        ProtocolError: 想定外の形式
    """
    if data is None or data is False:
        return []
    if not isinstance(data, list):
        raise ProtocolError(f"SearchSubtitles: data must be an array, got {type(data).__name__}")
    return [_parse_item(item, index, fingerprint) for index, item in enumerate(data)]


def _parse_item(item: Any, index: int, fingerprint: MediaFingerprint) -> SubtitleCandidate:
    if not isinstance(item, dict):
        raise ProtocolError(f"SearchSubtitles: item {index} is not a struct")

    for name in REQUIRED_FIELDS:
        if not isinstance(item.get(name), str) or not item[name]:
            raise ProtocolError(f"SearchSubtitles: item {index} is missing {name}")

    movie_hash = _optional_str(item.get("MovieHash"))
    matched_by = item.get("MatchedBy")
    if isinstance(matched_by, str):
        matched_by_hash = matched_by == "moviehash"
    else:
        matched_by_hash = movie_hash is not None and movie_hash.lower() == fingerprint.hex

    return SubtitleCandidate(
        id=item["IDSubtitleFile"],
        language_code=item["SubLanguageID"],
        download_url=item["SubDownloadLink"],
        format=item["SubFormat"],
        matched_by_hash=matched_by_hash,
        downloads_count=_parse_int(item.get("SubDownloadsCnt"), "SubDownloadsCnt", index),
        rating=_parse_rating(item.get("SubRating"), index),
        file_name=_optional_str(item.get("SubFileName")),
        encoding=_optional_str(item.get("SubEncoding")),
        movie_hash=movie_hash,
    )


def _parse_int(value: Any, name: str, index: int) -> int:
    """数値は文字列で返ってくることが多い"""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ProtocolError(f"SearchSubtitles: item {index} has non-numeric {name}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"SearchSubtitles: item {index} has non-numeric {name}") from e


def _parse_rating(value: Any, index: int) -> float | None:
    """評価 0.0 は未評価の意味"""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ProtocolError(f"SearchSubtitles: item {index} has non-numeric SubRating")
    try:
        rating = float(value)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"SearchSubtitles: item {index} has non-numeric SubRating") from e
    return rating if rating > 0 else None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
