"""ドメインエンティティ定義"""

import time
from dataclasses import dataclass, field
from typing import Any

UINT64_MAX = 2**64 - 1


@dataclass(frozen=True)
class MediaFingerprint:
    """動画ファイルの内容指紋（OpenSubtitles ハッシュ）を表す値オブジェクト"""

    hash: int
    size_bytes: int

    def __post_init__(self) -> None:
        if not 0 <= self.hash <= UINT64_MAX:
            raise ValueError("hash must fit in an unsigned 64-bit integer")
        if not 0 <= self.size_bytes <= UINT64_MAX:
            raise ValueError("size_bytes must fit in an unsigned 64-bit integer")

    @property
    def hex(self) -> str:
        """サーバーが期待する16桁の16進表記"""
        return f"{self.hash:016x}"


@dataclass(frozen=True)
class Credentials:
    """ログイン情報（空のユーザー名/パスワードは匿名ログイン）"""

    username: str = ""
    password: str = field(default="", repr=False)
    language: str = "en"
    client_id: str = "TemporaryUserAgent"

    @property
    def is_anonymous(self) -> bool:
        return not self.username


@dataclass
class Session:
    """
    リモートサービスの認証済みセッション

    RpcSession が所有する。再ログイン時は token がその場で差し替わる。
    スレッドセーフではない（呼び出し元ごとに1つ持つこと）。
    """

    token: str
    endpoint: str
    credentials: Credentials
    created_at: float = field(default_factory=time.monotonic)
    last_used_at: float = field(default_factory=time.monotonic)
    closed: bool = False

    @property
    def short_token(self) -> str:
        """ログ出力用の短縮トークン"""
        return f"{self.token[:6]}..." if len(self.token) > 6 else "***"

    def idle_seconds(self, now: float | None = None) -> float:
        """最後の呼び出しからの経過秒数"""
        current = time.monotonic() if now is None else now
        return current - self.last_used_at

    def touch(self, now: float | None = None) -> None:
        self.last_used_at = time.monotonic() if now is None else now


@dataclass(frozen=True)
class SubtitleCandidate:
    """検索結果の字幕候補（未ダウンロード）"""

    id: str
    language_code: str
    download_url: str
    format: str
    matched_by_hash: bool
    downloads_count: int
    rating: float | None = None
    file_name: str | None = None
    encoding: str | None = None
    movie_hash: str | None = None


@dataclass
class SubtitlePayload:
    """展開・デコード済みの字幕データ"""

    data: bytes
    encoding: str

    @property
    def text(self) -> str:
        """文字列として取得（不正なバイトは置換）"""
        return self.data.decode(self.encoding, errors="replace")


@dataclass(frozen=True)
class RpcResponse:
    """XML-RPC 呼び出し1回分の検証済みレスポンス"""

    method: str
    status: str
    data: Any
    raw: dict[str, Any]

    @property
    def status_code(self) -> int:
        """status 文字列（例: "200 OK"）の先頭の数値"""
        head = self.status.split(" ", 1)[0]
        return int(head) if head.isdigit() else 0

    @property
    def ok(self) -> bool:
        return self.status_code == 200
