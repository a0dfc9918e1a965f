"""字幕取得インターフェース"""

from typing import Protocol

from src.domain.entities import Session, SubtitlePayload


class SubtitleFetcher(Protocol):
    """字幕取得のインターフェース"""

    def fetch(
        self,
        download_url: str,
        encoding_hint: str | None = None,
    ) -> SubtitlePayload:
        """
        字幕をダウンロードして展開・デコード

        Args:
            download_url: 検索結果に含まれるダウンロードURL
            encoding_hint: 検索結果が示す文字コード（判定できない場合に使用）

        Returns:
            SubtitlePayload

        Raises:
            TransportError: ネットワークエラー
            DecodeError: 展開/デコード失敗
        """
        ...


class SubtitleIdFetcher(Protocol):
    """字幕ID指定で取得するインターフェース（セッションが必要）"""

    def fetch(
        self,
        session: Session,
        subtitle_id: str,
        encoding_hint: str | None = None,
    ) -> SubtitlePayload:
        ...
