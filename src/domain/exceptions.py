"""ドメイン固有の例外定義"""


class HashSubsError(Exception):
    """基底例外クラス"""

    pass


class IoError(HashSubsError):
    """ローカルファイルの読み込みエラー"""

    pass


class TooSmallError(IoError):
    """指紋計算に必要なサイズに満たないファイル"""

    pass


class AuthError(HashSubsError):
    """ログイン情報が拒否された"""

    pass


class TransportError(HashSubsError):
    """ネットワーク層のエラー（呼び出し元で再試行可能）"""

    pass


class ProtocolError(HashSubsError):
    """想定外/不正な形式のレスポンス"""

    pass


class RpcError(HashSubsError):
    """リモートから報告されたアプリケーションエラー"""

    def __init__(self, method: str, code: int, message: str):
        self.method = method
        self.code = code
        self.message = message
        super().__init__(f"{method} failed: {code} {message}")


class DecodeError(HashSubsError):
    """字幕データの展開/デコードエラー"""

    pass
