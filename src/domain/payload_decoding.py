"""ダウンロードした字幕データの展開と文字コード判定"""

import base64
import binascii
import gzip
import io
import zipfile
import zlib

import chardet

from src.domain.entities import SubtitlePayload
from src.domain.exceptions import DecodeError

GZIP_MAGIC = b"\x1f\x8b"
ZIP_MAGIC = b"PK\x03\x04"
# zlib ヘッダ（CMF=0x78 と各圧縮レベルの FLG）
ZLIB_HEADERS = (b"\x78\x01", b"\x78\x5e", b"\x78\x9c", b"\x78\xda")

SUBTITLE_EXTENSIONS = (".srt", ".sub", ".ass", ".ssa", ".vtt", ".smi", ".txt")

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8-sig"),
    (b"\xff\xfe", "utf-16"),
    (b"\xfe\xff", "utf-16"),
)

MIN_CHARDET_CONFIDENCE = 0.7


def decompress(raw: bytes) -> bytes:
    """
    シグネチャを見て透過的に展開

    Args:
        raw: ダウンロードしたバイト列

    Returns:
        展開後のバイト列

    Raises:
        DecodeError: 未知の形式、または壊れたアーカイブ
    """
    if raw.startswith(GZIP_MAGIC):
        try:
            return gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(f"Corrupt gzip payload: {e}") from e

    if raw.startswith(ZIP_MAGIC):
        return _extract_zip(raw)

    if raw[:2] in ZLIB_HEADERS:
        try:
            return zlib.decompress(raw)
        except zlib.error as e:
            raise DecodeError(f"Corrupt zlib payload: {e}") from e

    raise DecodeError(f"Unrecognized payload signature: {raw[:4].hex() or 'empty'}")


def _extract_zip(raw: bytes) -> bytes:
    """zip から字幕ファイル（なければ最初のファイル）を取り出す"""
    try:
        with zipfile.ZipFile(io.BytesIO(raw)) as archive:
            members = [info for info in archive.infolist() if not info.is_dir()]
            if not members:
                raise DecodeError("Zip archive contains no files")
            subtitle_members = [
                info
                for info in members
                if info.filename.lower().endswith(SUBTITLE_EXTENSIONS)
            ]
            chosen = (subtitle_members or members)[0]
            return archive.read(chosen)
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise DecodeError(f"Corrupt zip payload: {e}") from e
    except (RuntimeError, NotImplementedError) as e:
        # 暗号化メンバーや未対応の圧縮方式
        raise DecodeError(f"Unsupported zip payload: {e}") from e


def detect_encoding(data: bytes, hint: str | None = None) -> str:
    """
    文字コードを判定

    BOM → UTF-8 として妥当か → chardet（確信度 0.7 以上）→ hint → latin-1
    """
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name

    try:
        data.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    result = chardet.detect(data)
    if result.get("encoding") and (result.get("confidence") or 0) >= MIN_CHARDET_CONFIDENCE:
        return result["encoding"].lower()

    if hint:
        try:
            data.decode(hint)
            return hint
        except (LookupError, UnicodeDecodeError):
            pass

    return "latin-1"


def decode_payload(raw: bytes, encoding_hint: str | None = None) -> SubtitlePayload:
    """展開して SubtitlePayload を生成"""
    data = decompress(raw)
    return SubtitlePayload(data=data, encoding=detect_encoding(data, encoding_hint))


def decode_base64_gzip(encoded: str, encoding_hint: str | None = None) -> SubtitlePayload:
    """DownloadSubtitles の base64 + gzip 形式をデコード"""
    try:
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e
    return decode_payload(raw, encoding_hint)
