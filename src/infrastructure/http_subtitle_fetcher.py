"""HTTP で字幕をダウンロードするクライアント"""

import httpx

from src.domain.entities import SubtitlePayload
from src.domain.exceptions import TransportError
from src.domain.payload_decoding import decode_payload
from src.infrastructure.logging_config import get_logger

logger = get_logger(__name__)


class HttpSubtitleFetcher:
    """
    検索結果の SubDownloadLink から字幕を取得

    サーバーは通常 gzip で返すので透過的に展開する。
    ディスクへの書き出しはしない（呼び出し元の責務）。
    """

    def __init__(
        self,
        timeout_sec: float = 30.0,
        client: httpx.Client | None = None,
        user_agent: str = "hashsubs",
    ):
        """
        Args:
            timeout_sec: ダウンロードのタイムアウト（秒）
            client: 既存の httpx.Client（テスト用に差し替え可能）
            user_agent: HTTP の User-Agent ヘッダ
        """
        self.client = client or httpx.Client(timeout=timeout_sec, follow_redirects=True)
        self.headers = {"User-Agent": user_agent}

    def fetch(
        self,
        download_url: str,
        encoding_hint: str | None = None,
    ) -> SubtitlePayload:
        """
        字幕をダウンロードして展開・デコード

        Raises:
            TransportError: タイムアウト・接続エラー・非2xxステータス
            DecodeError: 未知の圧縮形式、または壊れたデータ
        """
        logger.info(f"[取得] ダウンロード開始: {download_url}")

        try:
            response = self.client.get(download_url, headers=self.headers)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out downloading {download_url}") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code} downloading {download_url}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to download {download_url}: {e}") from e

        payload = decode_payload(response.content, encoding_hint)
        logger.info(
            f"[取得] 完了: {len(response.content)} → {len(payload.data)} bytes ({payload.encoding})"
        )
        return payload

    def close(self) -> None:
        self.client.close()
