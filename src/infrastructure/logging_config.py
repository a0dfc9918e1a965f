"""ロギング設定"""

import logging
import sys
from typing import Any

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# ログに出さないキー
SECRET_KEYS = frozenset({"password", "token"})

# 通信ライブラリのログは WARNING 以上のみ
NOISY_LOGGERS = ("httpx", "httpcore", "chardet")

_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """名前付きロガーを取得（__name__ を渡す）"""
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


def setup_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
) -> None:
    """
    CLI 全体のロギングを設定

    Args:
        level: ログレベル
        format_string: ログフォーマット文字列（None なら DEFAULT_FORMAT）
    """
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def parse_log_level(name: str, default: int = logging.INFO) -> int:
    """ログレベル名（DEBUG など）を数値に変換"""
    level = getattr(logging, name.strip().upper(), None)
    return level if isinstance(level, int) else default


class LogContext:
    """
    ログに添える key=value 形式のコンテキスト

    password / token は値を伏せて出力する。

    Example:
        ctx = LogContext(file="movie.mkv", hash="8e245d9679d31e12")
        logger.info(f"[指紋] {ctx}")
    """

    def __init__(self, **kwargs: Any):
        self._data = kwargs

    def __str__(self) -> str:
        parts = []
        for key, value in self._data.items():
            shown = "***" if key in SECRET_KEYS else repr(value)
            parts.append(f"{key}={shown}")
        return " | ".join(parts)
