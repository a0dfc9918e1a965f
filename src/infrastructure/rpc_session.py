"""認証済みセッションの管理（ログイン・キープアライブ・ログアウト）"""

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from src.application.interfaces.rpc_transport import RpcTransport
from src.domain.entities import Credentials, RpcResponse, Session
from src.domain.exceptions import AuthError, ProtocolError, RpcError
from src.infrastructure.logging_config import LogContext, get_logger
from src.infrastructure.xmlrpc_transport import DEFAULT_ENDPOINT

logger = get_logger(__name__)

# トークン失効（再ログインで回復できる）
TOKEN_EXPIRED_CODES = frozenset({401, 406})
# ログイン拒否（401 Unauthorized, 411-415 はユーザーエージェント関連）
AUTH_REJECTED_CODES = frozenset({401, 411, 412, 413, 414, 415})

# サーバー側のトークンは無操作15分で失効する
DEFAULT_KEEPALIVE_INTERVAL_SEC = 600.0


class RpcSession:
    """
    リモートサービスとの認証済みセッションを扱う

    Session は呼び出し元が保持して各操作に渡す。
    1つの Session を複数スレッドから同時に使わないこと。
    """

    def __init__(
        self,
        transport: RpcTransport,
        endpoint: str = DEFAULT_ENDPOINT,
        keepalive_interval_sec: float = DEFAULT_KEEPALIVE_INTERVAL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            transport: RPCトランスポート
            endpoint: ログインに使うURL
            keepalive_interval_sec: これ以上アイドルなら呼び出し前に NoOperation を送る（0で無効）
            clock: 単調増加の時計（テスト用に差し替え可能）
        """
        self.transport = transport
        self.endpoint = endpoint
        self.keepalive_interval_sec = keepalive_interval_sec
        self.clock = clock

    def login(
        self,
        username: str,
        password: str,
        language: str,
        client_id: str,
    ) -> Session:
        """
        ログインしてセッションを作成

        Raises:
            AuthError: ログイン情報/ユーザーエージェントが拒否された
            TransportError: ネットワークエラー
            ProtocolError: トークンが返らない
        """
        return self.login_with(
            Credentials(
                username=username,
                password=password,
                language=language,
                client_id=client_id,
            )
        )

    def login_with(self, credentials: Credentials) -> Session:
        """Credentials でログイン"""
        ctx = LogContext(user=credentials.username or "(anonymous)", client=credentials.client_id)
        logger.info(f"[RPC] ログイン: {ctx}")

        raw = self.transport.call(
            "LogIn",
            (
                credentials.username,
                credentials.password,
                credentials.language,
                credentials.client_id,
            ),
            endpoint=self.endpoint,
        )
        response = self._to_response("LogIn", raw)

        if response.status_code in AUTH_REJECTED_CODES:
            logger.error(f"[RPC] ログイン拒否: {response.status}")
            raise AuthError(f"Login rejected: {response.status}")
        if not response.ok:
            raise RpcError("LogIn", response.status_code, response.status)

        token = raw.get("token")
        if not isinstance(token, str) or not token:
            raise ProtocolError("LogIn: response has no token")

        endpoint = self.endpoint
        data = raw.get("data")
        if isinstance(data, dict) and isinstance(data.get("Content-Location"), str):
            endpoint = data["Content-Location"]

        now = self.clock()
        session = Session(
            token=token,
            endpoint=endpoint,
            credentials=credentials,
            created_at=now,
            last_used_at=now,
        )
        logger.debug(f"  トークン: {session.short_token}, endpoint={endpoint}")
        return session

    def call(
        self,
        session: Session,
        method: str,
        params: tuple[Any, ...] = (),
    ) -> RpcResponse:
        """
        トークン付きでリモート手続きを呼び出す

        トークン失効が報告された場合のみ、再ログインして1回だけ再試行する。

        Args:
            session: ログイン済みセッション
            method: メソッド名
            params: トークン以降の引数

        Returns:
            RpcResponse（status が 200 のもの）

        Raises:
            RpcError: リモートがエラーを返した（再試行後も含む）
            TransportError: ネットワークエラー
            ProtocolError: レスポンス形式が不正
        """
        if session.closed:
            raise RpcError(method, 0, "session is closed")

        self._refresh_if_idle(session, method)

        response = self._invoke(session, method, params)
        if response.status_code in TOKEN_EXPIRED_CODES:
            logger.info(f"[RPC] {method}: トークン失効 ({response.status})、再ログインして再試行")
            self._relogin(session)
            response = self._invoke(session, method, params)

        if not response.ok:
            raise RpcError(method, response.status_code, response.status)
        return response

    def keep_alive(self, session: Session) -> bool:
        """
        NoOperation を送ってトークンを延命

        Returns:
            トークンがまだ有効なら True、失効していれば False
        """
        response = self._invoke(session, "NoOperation", ())
        if response.status_code in TOKEN_EXPIRED_CODES:
            return False
        if not response.ok:
            raise RpcError("NoOperation", response.status_code, response.status)
        return True

    def logout(self, session: Session) -> None:
        """ログアウト（失敗はログのみ、例外は送出しない）"""
        if session.closed:
            return
        try:
            response = self._invoke(session, "LogOut", ())
            if not response.ok:
                logger.warning(f"[RPC] ログアウト失敗: {response.status}")
            else:
                logger.info("[RPC] ログアウト")
        except Exception as e:
            logger.warning(f"[RPC] ログアウト失敗: {type(e).__name__}: {e}")
        finally:
            session.closed = True

    @contextmanager
    def open_session(self, credentials: Credentials) -> Iterator[Session]:
        """
        with 文でセッションを取得し、抜けるときに必ずログアウトする

        Example:
            with rpc.open_session(credentials) as session:
                searcher.search(session, fingerprint, ["eng"])
        """
        session = self.login_with(credentials)
        try:
            yield session
        finally:
            self.logout(session)

    def _refresh_if_idle(self, session: Session, method: str) -> None:
        """
        アイドル時間が長ければ先に延命し、失効していれば再ログイン

        失効以外のエラーは無視して本来の呼び出しに任せる。
        """
        if self.keepalive_interval_sec <= 0:
            return
        if session.idle_seconds(self.clock()) <= self.keepalive_interval_sec:
            return
        logger.debug(f"[RPC] アイドル {session.idle_seconds(self.clock()):.0f}秒、NoOperation 送信")
        try:
            alive = self.keep_alive(session)
        except RpcError as e:
            logger.warning(f"[RPC] {method} 前の NoOperation 失敗: {e.code} {e.message}")
            return
        if not alive:
            self._relogin(session)

    def _relogin(self, session: Session) -> None:
        fresh = self.login_with(session.credentials)
        session.token = fresh.token
        session.endpoint = fresh.endpoint
        session.touch(self.clock())

    def _invoke(self, session: Session, method: str, params: tuple[Any, ...]) -> RpcResponse:
        raw = self.transport.call(method, (session.token, *params), endpoint=session.endpoint)
        session.touch(self.clock())
        return self._to_response(method, raw)

    @staticmethod
    def _to_response(method: str, raw: Any) -> RpcResponse:
        """戻り値を RpcResponse に変換（status のない形式は ProtocolError）"""
        if not isinstance(raw, dict):
            raise ProtocolError(f"{method}: expected a struct, got {type(raw).__name__}")
        status = raw.get("status")
        if not isinstance(status, str):
            raise ProtocolError(f"{method}: response has no status")
        return RpcResponse(method=method, status=status, data=raw.get("data"), raw=raw)
