"""セッション提供インターフェース"""

from contextlib import AbstractContextManager
from typing import Protocol

from src.domain.entities import Credentials, Session


class SessionProvider(Protocol):
    """ログインからログアウトまでを with 文で管理するインターフェース"""

    def open_session(self, credentials: Credentials) -> AbstractContextManager[Session]:
        """
        ログイン済みセッションを返すコンテキストマネージャ

        抜けるときは例外の有無にかかわらずログアウトすること。

        Raises:
            AuthError: ログイン拒否
            TransportError: ネットワークエラー
        """
        ...
