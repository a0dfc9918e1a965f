"""ユニットテスト共通のフィクスチャ"""

from typing import Any, Callable

import pytest

from src.domain.entities import Credentials


class ScriptedTransport:
    """
    メソッドごとに応答を順に返すフェイクトランスポート

    キューの最後の応答は繰り返し返す。例外を入れるとそれを送出する。
    """

    def __init__(self, responses: dict[str, list[Any]]):
        self.responses = {method: list(queue) for method, queue in responses.items()}
        self.calls: list[tuple[str, tuple[Any, ...], str | None]] = []

    def call(self, method: str, params: tuple[Any, ...], endpoint: str | None = None) -> Any:
        self.calls.append((method, params, endpoint))
        queue = self.responses.get(method)
        if not queue:
            raise AssertionError(f"unexpected call: {method}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def methods(self) -> list[str]:
        return [method for method, _, _ in self.calls]


def login_ok(token: str = "tok-1", **data: Any) -> dict[str, Any]:
    response: dict[str, Any] = {"status": "200 OK", "token": token, "seconds": 0.01}
    if data:
        response["data"] = data
    return response


def status(text: str, data: Any = None) -> dict[str, Any]:
    response: dict[str, Any] = {"status": text, "seconds": 0.01}
    if data is not None:
        response["data"] = data
    return response


@pytest.fixture
def scripted_transport() -> Callable[[dict[str, list[Any]]], ScriptedTransport]:
    return ScriptedTransport


@pytest.fixture
def rpc_status() -> Callable[..., dict[str, Any]]:
    """status 付きのレスポンス struct を作る"""
    return status


@pytest.fixture
def rpc_login_ok() -> Callable[..., dict[str, Any]]:
    """LogIn 成功レスポンスを作る"""
    return login_ok


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="alice", password="secret", language="en", client_id="TestAgent")
