# Domain Layer
from src.domain.entities import (
    Credentials,
    MediaFingerprint,
    RpcResponse,
    Session,
    SubtitleCandidate,
    SubtitlePayload,
)
from src.domain.exceptions import (
    AuthError,
    DecodeError,
    HashSubsError,
    IoError,
    ProtocolError,
    RpcError,
    TooSmallError,
    TransportError,
)

__all__ = [
    "MediaFingerprint",
    "Credentials",
    "Session",
    "SubtitleCandidate",
    "SubtitlePayload",
    "RpcResponse",
    "HashSubsError",
    "IoError",
    "TooSmallError",
    "AuthError",
    "TransportError",
    "ProtocolError",
    "RpcError",
    "DecodeError",
]
