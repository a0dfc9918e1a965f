"""字幕検索インターフェース"""

from typing import Iterable, Protocol

from src.domain.entities import MediaFingerprint, Session, SubtitleCandidate


class SubtitleSearcher(Protocol):
    """指紋 + 言語による字幕検索のインターフェース"""

    def search(
        self,
        session: Session,
        fingerprint: MediaFingerprint,
        language_codes: Iterable[str],
    ) -> list[SubtitleCandidate]:
        """
        字幕候補を検索

        Args:
            session: ログイン済みセッション
            fingerprint: 動画ファイルの指紋
            language_codes: 言語コード（ISO 639-2）

        Returns:
            候補リスト（0件なら空リスト）

        Raises:
            ProtocolError: レスポンス形式が不正
        """
        ...
