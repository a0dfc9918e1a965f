"""コマンドラインエントリーポイント"""

import argparse
import sys
from pathlib import Path

# プロジェクトルートをパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# .envファイルを最初に読み込む
from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from config.settings import Settings, get_settings
from src.application.usecases.find_subtitle import FindSubtitleConfig, FindSubtitleUseCase
from src.domain.entities import SubtitleCandidate
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
from src.domain.ranking import RankingPolicy
from src.infrastructure.http_subtitle_fetcher import HttpSubtitleFetcher
from src.infrastructure.logging_config import get_logger, parse_log_level, setup_logging
from src.infrastructure.opensubtitles_searcher import OpenSubtitlesSearchClient
from src.infrastructure.retry import transport_retry
from src.infrastructure.rpc_session import RpcSession
from src.infrastructure.rpc_subtitle_fetcher import RpcSubtitleFetcher
from src.infrastructure.xmlrpc_transport import XmlRpcTransport

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 2
# 例外の種類ごとの終了コード（サブクラスを先に並べる）
EXIT_CODES: list[tuple[type[HashSubsError], int]] = [
    (TooSmallError, 4),
    (IoError, 3),
    (AuthError, 5),
    (TransportError, 6),
    (ProtocolError, 7),
    (RpcError, 8),
    (DecodeError, 9),
]
EXIT_UNKNOWN = 1


def exit_code_for(error: HashSubsError) -> int:
    for kind, code in EXIT_CODES:
        if isinstance(error, kind):
            return code
    return EXIT_UNKNOWN


def init_usecase(settings: Settings, languages: list[str], prefer_hash_match: bool) -> FindSubtitleUseCase:
    """DIでユースケースを組み立て"""
    transport = XmlRpcTransport(
        endpoint=settings.OPENSUBTITLES_API_URL,
        timeout_sec=settings.RPC_TIMEOUT_SEC,
        user_agent=settings.CLIENT_ID,
    )
    rpc = RpcSession(
        transport,
        endpoint=settings.OPENSUBTITLES_API_URL,
        keepalive_interval_sec=settings.KEEPALIVE_INTERVAL_SEC,
    )
    return FindSubtitleUseCase(
        session_provider=rpc,
        subtitle_searcher=OpenSubtitlesSearchClient(rpc),
        subtitle_fetcher=HttpSubtitleFetcher(
            timeout_sec=settings.DOWNLOAD_TIMEOUT_SEC,
            user_agent=settings.CLIENT_ID,
        ),
        credentials=settings.credentials(),
        id_fetcher=RpcSubtitleFetcher(rpc),
        config=FindSubtitleConfig(
            languages=languages,
            prefer_hash_match=prefer_hash_match,
            ranking_policy=RankingPolicy.from_string(settings.RANKING_TIE_BREAK),
            fetch_mode=settings.FETCH_MODE,
        ),
        network_retry=transport_retry(settings.TRANSPORT_RETRY_ATTEMPTS),
    )


def subtitle_path(video_path: Path, candidate: SubtitleCandidate) -> Path:
    """動画と同じ場所に <stem>.<lang>.<format> で保存"""
    return video_path.with_name(f"{video_path.stem}.{candidate.language_code}.{candidate.format}")


def format_candidate(index: int, candidate: SubtitleCandidate) -> str:
    rating = f"{candidate.rating:.1f}" if candidate.rating is not None else "-"
    match = "hash" if candidate.matched_by_hash else "meta"
    name = candidate.file_name or candidate.id
    return (
        f"{index:>3}. [{candidate.language_code}] {match:<4} "
        f"dl={candidate.downloads_count:<7} rating={rating:<4} {name}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashsubs",
        description="動画ファイルのハッシュで OpenSubtitles から字幕を取得",
    )
    parser.add_argument("video", type=Path, help="動画ファイル")
    parser.add_argument(
        "-l",
        "--lang",
        action="append",
        dest="languages",
        help="字幕の言語（ISO 639-2、複数指定は優先順）",
    )
    parser.add_argument("--list", action="store_true", help="候補の一覧だけ表示")
    parser.add_argument("--pick", type=int, default=1, help="ランキングの何番目を取得するか")
    parser.add_argument(
        "--no-hash-preference",
        action="store_true",
        help="ハッシュ一致を優先しない",
    )
    parser.add_argument("-o", "--output", type=Path, help="出力ファイル")
    parser.add_argument("-f", "--force", action="store_true", help="既存の字幕を上書き")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUGログを出力")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> int:
    languages = [code.lower() for code in args.languages] if args.languages else settings.language_list()
    prefer_hash_match = settings.PREFER_HASH_MATCH and not args.no_hash_preference
    try:
        usecase = init_usecase(settings, languages, prefer_hash_match)
    except ValueError as e:
        # RANKING_TIE_BREAK / FETCH_MODE などの不正な設定値
        logger.error(f"設定エラー: {e}")
        return EXIT_UNKNOWN

    fingerprint = usecase.fingerprint(args.video)
    logger.info(f"[指紋] {args.video.name}: hash={fingerprint.hex} size={fingerprint.size_bytes}")

    with usecase.login_session() as session:
        ranked = usecase.select_all(usecase.search(session, fingerprint))

        if args.list:
            for index, candidate in enumerate(ranked, 1):
                print(format_candidate(index, candidate))
            return EXIT_OK if ranked else EXIT_NOT_FOUND

        if not ranked:
            logger.warning(f"字幕が見つかりません: {args.video.name} (言語: {languages})")
            return EXIT_NOT_FOUND
        if not 1 <= args.pick <= len(ranked):
            logger.error(f"--pick は 1〜{len(ranked)} で指定してください")
            return EXIT_UNKNOWN

        chosen = ranked[args.pick - 1]
        output = args.output or subtitle_path(args.video, chosen)
        if output.exists() and not args.force:
            logger.info(f"既に存在するためスキップ: {output}")
            return EXIT_OK

        payload = usecase.fetch_subtitle(chosen, session)

    output.write_bytes(payload.data)
    logger.info(f"保存しました: {output} ({payload.encoding})")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(level=parse_log_level("DEBUG" if args.verbose else settings.LOG_LEVEL))

    try:
        return run(args, settings)
    except HashSubsError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return exit_code_for(e)


if __name__ == "__main__":
    sys.exit(main())
