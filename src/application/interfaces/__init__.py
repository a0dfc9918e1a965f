# Application Interfaces (Protocols)
from src.application.interfaces.rpc_transport import RpcTransport
from src.application.interfaces.session_provider import SessionProvider
from src.application.interfaces.subtitle_fetcher import SubtitleFetcher, SubtitleIdFetcher
from src.application.interfaces.subtitle_searcher import SubtitleSearcher

__all__ = [
    "RpcTransport",
    "SessionProvider",
    "SubtitleSearcher",
    "SubtitleFetcher",
    "SubtitleIdFetcher",
]
