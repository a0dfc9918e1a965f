"""OpenSubtitles 互換の動画ファイル指紋計算"""

import struct
from pathlib import Path

from src.domain.entities import MediaFingerprint
from src.domain.exceptions import IoError, TooSmallError

# 先頭・末尾それぞれ64KiBを読む
BLOCK_SIZE = 65536
WORD_SIZE = 8
_MASK = 0xFFFFFFFFFFFFFFFF


def checksum_block(block: bytes) -> int:
    """
    ブロックをリトルエンディアンの u64 列として合計（mod 2^64）

    Args:
        block: 長さが8の倍数のバイト列

    Returns:
        64bit で折り返した合計値
    """
    if len(block) % WORD_SIZE:
        raise ValueError("block length must be a multiple of 8")
    words = struct.unpack(f"<{len(block) // WORD_SIZE}Q", block)
    return sum(words) & _MASK


def compute_fingerprint(file_path: str | Path) -> MediaFingerprint:
    """
    動画ファイルの指紋を計算

    hash = size + sum(先頭64KiB) + sum(末尾64KiB)  (mod 2^64)
    サーバー側も同じ関数で計算するため、ビット単位で一致させること。

    Args:
        file_path: 動画ファイルのパス

    Returns:
        MediaFingerprint

    Raises:
        TooSmallError: 64KiB 未満のファイル
        IoError: ファイルを開けない/読めない
    """
    path = Path(file_path)
    try:
        with path.open("rb") as f:
            size = path.stat().st_size
            if size < BLOCK_SIZE:
                raise TooSmallError(
                    f"{path.name}: {size} bytes is smaller than {BLOCK_SIZE} bytes"
                )
            head = f.read(BLOCK_SIZE)
            f.seek(size - BLOCK_SIZE)
            tail = f.read(BLOCK_SIZE)
    except OSError as e:
        raise IoError(f"Failed to read {path}: {e}") from e

    if len(head) != BLOCK_SIZE or len(tail) != BLOCK_SIZE:
        raise IoError(f"Short read on {path}")

    file_hash = (size + checksum_block(head) + checksum_block(tail)) & _MASK
    return MediaFingerprint(hash=file_hash, size_bytes=size)
