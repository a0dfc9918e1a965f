"""DownloadSubtitles（XML-RPC）で字幕を取得するクライアント"""

from src.domain.entities import Session, SubtitlePayload
from src.domain.exceptions import ProtocolError
from src.domain.payload_decoding import decode_base64_gzip
from src.infrastructure.logging_config import get_logger
from src.infrastructure.rpc_session import RpcSession

logger = get_logger(__name__)


class RpcSubtitleFetcher:
    """字幕ID を指定して base64 + gzip のデータを受け取る"""

    def __init__(self, rpc: RpcSession):
        self.rpc = rpc

    def fetch(
        self,
        session: Session,
        subtitle_id: str,
        encoding_hint: str | None = None,
    ) -> SubtitlePayload:
        """
        字幕を取得してデコード

        Raises:
            ProtocolError: 指定IDのデータが含まれていない
            DecodeError: base64/gzip の展開失敗
            RpcError: リモートがエラーを返した
        """
        logger.info(f"[取得] DownloadSubtitles: id={subtitle_id}")
        response = self.rpc.call(session, "DownloadSubtitles", ([subtitle_id],))

        items = response.data
        if not isinstance(items, list):
            raise ProtocolError("DownloadSubtitles: data must be an array")

        for item in items:
            if not isinstance(item, dict):
                raise ProtocolError("DownloadSubtitles: item is not a struct")
            if str(item.get("idsubtitlefile")) != subtitle_id:
                continue
            encoded = item.get("data")
            if not isinstance(encoded, str):
                raise ProtocolError(f"DownloadSubtitles: no data for {subtitle_id}")
            return decode_base64_gzip(encoded, encoding_hint)

        raise ProtocolError(f"DownloadSubtitles: {subtitle_id} not in response")
