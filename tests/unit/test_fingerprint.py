"""動画ファイル指紋計算のテスト"""

import struct
from pathlib import Path

import pytest

from src.domain.exceptions import IoError, TooSmallError
from src.domain.fingerprint import BLOCK_SIZE, checksum_block, compute_fingerprint


def write_file(path: Path, size: int, words: dict[int, int] | None = None) -> Path:
    """ゼロ埋めファイルを作り、指定オフセットに u64 (LE) を書き込む"""
    data = bytearray(size)
    for offset, value in (words or {}).items():
        data[offset : offset + 8] = struct.pack("<Q", value)
    path.write_bytes(bytes(data))
    return path


class TestComputeFingerprint:
    """compute_fingerprintのテスト"""

    def test_zero_file_vector(self, tmp_path: Path) -> None:
        """128KiB のゼロファイルはサイズのみがハッシュになる"""
        path = write_file(tmp_path / "zeros.bin", 131072)
        fp = compute_fingerprint(path)
        assert fp.hash == 131072
        assert fp.size_bytes == 131072

    def test_deterministic(self, tmp_path: Path) -> None:
        """同じ内容なら同じ指紋"""
        path = tmp_path / "movie.mkv"
        path.write_bytes(bytes(range(256)) * 1024)
        assert compute_fingerprint(path) == compute_fingerprint(path)

    def test_independent_of_file_name(self, tmp_path: Path) -> None:
        """ファイル名が違っても内容が同じなら同じ指紋"""
        content = bytes(range(256)) * 600
        a = tmp_path / "a.avi"
        b = tmp_path / "b.mkv"
        a.write_bytes(content)
        b.write_bytes(content)
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_too_small(self, tmp_path: Path) -> None:
        """64KiB 未満はエラー"""
        path = write_file(tmp_path / "small.bin", BLOCK_SIZE - 1)
        with pytest.raises(TooSmallError):
            compute_fingerprint(path)

    def test_too_small_is_io_error(self, tmp_path: Path) -> None:
        """TooSmallError は IoError としても捕捉できる"""
        path = write_file(tmp_path / "small.bin", 10)
        with pytest.raises(IoError):
            compute_fingerprint(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """存在しないファイルは IoError"""
        with pytest.raises(IoError):
            compute_fingerprint(tmp_path / "missing.mkv")

    def test_only_head_and_tail_are_summed(self, tmp_path: Path) -> None:
        """先頭と末尾の64KiBのみが合計される"""
        size = 200000
        path = write_file(
            tmp_path / "movie.bin",
            size,
            {
                0: 5,  # 先頭ブロック
                70000: 0xFFFFFFFFFFFFFFFF,  # どちらのブロックにも入らない
                size - 8: 7,  # 末尾ブロック
            },
        )
        fp = compute_fingerprint(path)
        assert fp.hash == size + 5 + 7

    def test_exact_block_size_counts_block_twice(self, tmp_path: Path) -> None:
        """ちょうど64KiBなら同じブロックが2回合計される"""
        path = write_file(tmp_path / "exact.bin", BLOCK_SIZE, {0: 1})
        fp = compute_fingerprint(path)
        assert fp.hash == BLOCK_SIZE + 2

    def test_wraparound(self, tmp_path: Path) -> None:
        """2^64 で折り返す"""
        path = write_file(tmp_path / "wrap.bin", 131072, {0: 0xFFFFFFFFFFFFFFFF})
        fp = compute_fingerprint(path)
        assert fp.hash == 131071

    def test_little_endian(self, tmp_path: Path) -> None:
        """ワードはリトルエンディアンで解釈する"""
        path = tmp_path / "le.bin"
        data = bytearray(131072)
        data[0] = 0x01  # LE なら 1、BE なら 2^56
        path.write_bytes(bytes(data))
        assert compute_fingerprint(path).hash == 131072 + 1


class TestChecksumBlock:
    """checksum_blockのテスト"""

    def test_sum(self) -> None:
        block = struct.pack("<3Q", 1, 2, 3)
        assert checksum_block(block) == 6

    def test_wraps(self) -> None:
        block = struct.pack("<2Q", 0xFFFFFFFFFFFFFFFF, 2)
        assert checksum_block(block) == 1

    def test_rejects_partial_word(self) -> None:
        """8の倍数でない長さはエラー"""
        with pytest.raises(ValueError, match="multiple of 8"):
            checksum_block(b"\x00" * 7)
