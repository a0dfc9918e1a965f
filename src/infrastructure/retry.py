"""リトライ戦略"""

from typing import Any, Callable, TypeVar

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.domain.exceptions import TransportError

F = TypeVar("F", bound=Callable[..., Any])


def transport_retry(attempts: int = 1) -> Callable[[F], F]:
    """
    TransportError のみを再試行するデコレータ（呼び出し元で任意に使用）

    attempts=1 は再試行なし。最後の例外はそのまま送出される。
    """
    return retry(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TransportError),
        reraise=True,
    )
