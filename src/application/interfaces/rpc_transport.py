"""RPCトランスポートインターフェース"""

from typing import Any, Protocol


class RpcTransport(Protocol):
    """リモート手続き呼び出しのインターフェース（ワイヤ形式は実装側）"""

    def call(
        self,
        method: str,
        params: tuple[Any, ...],
        endpoint: str | None = None,
    ) -> Any:
        """
        リモート手続きを呼び出す

        Args:
            method: メソッド名（例: "SearchSubtitles"）
            params: 位置引数
            endpoint: 呼び出し先URL（Noneなら既定のURL）

        Returns:
            デシリアライズ済みの戻り値（通常は dict）

        Raises:
            TransportError: ネットワーク層のエラー
            RpcError: リモートが fault を返した
            ProtocolError: レスポンスを解釈できない
        """
        ...
