"""httpx ベースの XML-RPC トランスポート"""

import xmlrpc.client
from typing import Any
from xml.parsers.expat import ExpatError

import httpx

from src.domain.exceptions import ProtocolError, RpcError, TransportError
from src.infrastructure.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "https://api.opensubtitles.org/xml-rpc"


class XmlRpcTransport:
    """
    XML-RPC のリクエストを xmlrpc.client で組み立て、httpx で送信する

    httpx.Client のコネクションプールはスレッド間で共有してよい。
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_sec: float = 10.0,
        client: httpx.Client | None = None,
        user_agent: str = "hashsubs",
    ):
        """
        Args:
            endpoint: 既定の呼び出し先URL
            timeout_sec: リクエストのタイムアウト（秒）
            client: 既存の httpx.Client（テスト用に差し替え可能）
            user_agent: HTTP の User-Agent ヘッダ
        """
        self.endpoint = endpoint
        self.client = client or httpx.Client(timeout=timeout_sec)
        self.headers = {
            "Content-Type": "text/xml",
            "User-Agent": user_agent,
        }

    def call(
        self,
        method: str,
        params: tuple[Any, ...],
        endpoint: str | None = None,
    ) -> Any:
        """
        リモート手続きを呼び出す

        Raises:
            TransportError: タイムアウト・接続エラー・非2xxステータス
            RpcError: XML-RPC fault
            ProtocolError: XML として解釈できないレスポンス
        """
        url = endpoint or self.endpoint
        body = xmlrpc.client.dumps(params, methodname=method, allow_none=True)
        logger.debug(f"[RPC] {method} -> {url}")

        try:
            response = self.client.post(url, content=body.encode("utf-8"), headers=self.headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method}: HTTP {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method}: {type(e).__name__}: {e}") from e

        try:
            result, _ = xmlrpc.client.loads(response.content, use_builtin_types=True)
        except xmlrpc.client.Fault as e:
            raise RpcError(method, e.faultCode, e.faultString) from e
        except (ExpatError, xmlrpc.client.ResponseError, ValueError) as e:
            raise ProtocolError(f"{method}: malformed XML-RPC response: {e}") from e

        if len(result) != 1:
            raise ProtocolError(f"{method}: expected one return value, got {len(result)}")
        return result[0]

    def close(self) -> None:
        self.client.close()
