# Infrastructure Layer
from src.infrastructure.http_subtitle_fetcher import HttpSubtitleFetcher
from src.infrastructure.opensubtitles_searcher import OpenSubtitlesSearchClient
from src.infrastructure.rpc_session import RpcSession
from src.infrastructure.rpc_subtitle_fetcher import RpcSubtitleFetcher
from src.infrastructure.xmlrpc_transport import XmlRpcTransport

__all__ = [
    "XmlRpcTransport",
    "RpcSession",
    "OpenSubtitlesSearchClient",
    "HttpSubtitleFetcher",
    "RpcSubtitleFetcher",
]
