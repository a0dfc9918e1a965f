"""メインユースケース: 動画ファイルに合う字幕を検索・取得"""

import time
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from src.application.interfaces.session_provider import SessionProvider
from src.application.interfaces.subtitle_fetcher import SubtitleFetcher, SubtitleIdFetcher
from src.application.interfaces.subtitle_searcher import SubtitleSearcher
from src.domain.entities import (
    Credentials,
    MediaFingerprint,
    Session,
    SubtitleCandidate,
    SubtitlePayload,
)
from src.domain.fingerprint import compute_fingerprint
from src.domain.ranking import DEFAULT_POLICY, RankingPolicy, rank_candidates, select_best

FETCH_MODES = ("http", "rpc")


@dataclass
class FindSubtitleConfig:
    """ユースケースの設定"""

    languages: list[str] = field(default_factory=lambda: ["eng"])  # 優先順
    prefer_hash_match: bool = True
    ranking_policy: RankingPolicy = DEFAULT_POLICY
    fetch_mode: str = "http"  # "http": ダウンロードURL / "rpc": DownloadSubtitles

    def __post_init__(self) -> None:
        if self.fetch_mode not in FETCH_MODES:
            raise ValueError(f"fetch_mode must be one of {FETCH_MODES}")


@dataclass
class FindSubtitleResult:
    """パイプライン1回分の結果"""

    file_path: Path
    fingerprint: MediaFingerprint
    candidates: list[SubtitleCandidate]  # ランキング済み
    chosen: SubtitleCandidate | None
    payload: SubtitlePayload | None
    processing_time_sec: float

    @property
    def found(self) -> bool:
        return self.payload is not None


class FindSubtitleUseCase:
    """
    メインユースケース: 指紋計算 → 検索 → 選択 → 取得

    1ファイルにつき逐次処理。複数ファイルを並列に処理する場合は
    インスタンスごと（セッションごと）に分けること。
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        subtitle_searcher: SubtitleSearcher,
        subtitle_fetcher: SubtitleFetcher,
        credentials: Credentials,
        id_fetcher: SubtitleIdFetcher | None = None,
        config: FindSubtitleConfig | None = None,
        network_retry: Callable[[Callable[..., Any]], Callable[..., Any]] | None = None,
    ):
        """
        Args:
            session_provider: ログイン〜ログアウトを管理
            subtitle_searcher: 字幕検索
            subtitle_fetcher: URL 指定の字幕取得
            credentials: ログイン情報
            id_fetcher: ID 指定の字幕取得（fetch_mode="rpc" の場合に必須）
            config: 設定
            network_retry: 検索・取得をラップするデコレータ（None なら再試行なし）
        """
        self.session_provider = session_provider
        self.subtitle_searcher = subtitle_searcher
        self.subtitle_fetcher = subtitle_fetcher
        self.credentials = credentials
        self.id_fetcher = id_fetcher
        self.config = config or FindSubtitleConfig()
        self.network_retry = network_retry or (lambda func: func)
        if self.config.fetch_mode == "rpc" and id_fetcher is None:
            raise ValueError("fetch_mode 'rpc' requires an id_fetcher")

    def fingerprint(self, file_path: str | Path) -> MediaFingerprint:
        return compute_fingerprint(file_path)

    def login_session(self, credentials: Credentials | None = None) -> AbstractContextManager[Session]:
        """with 文で使うセッション（抜けるときにログアウト）"""
        return self.session_provider.open_session(credentials or self.credentials)

    def search(
        self,
        session: Session,
        fingerprint: MediaFingerprint,
        languages: Iterable[str] | None = None,
    ) -> list[SubtitleCandidate]:
        codes = list(languages) if languages is not None else self.config.languages
        search = self.network_retry(self.subtitle_searcher.search)
        return search(session, fingerprint, codes)

    def select_best(
        self,
        candidates: Sequence[SubtitleCandidate],
        languages: Sequence[str] | None = None,
        prefer_hash_match: bool | None = None,
    ) -> SubtitleCandidate | None:
        return select_best(
            candidates,
            languages if languages is not None else self.config.languages,
            self.config.prefer_hash_match if prefer_hash_match is None else prefer_hash_match,
            self.config.ranking_policy,
        )

    def select_all(
        self,
        candidates: Sequence[SubtitleCandidate],
        languages: Sequence[str] | None = None,
        prefer_hash_match: bool | None = None,
    ) -> list[SubtitleCandidate]:
        """対話的に選ばせる場合のランキング済み全候補"""
        return rank_candidates(
            candidates,
            languages if languages is not None else self.config.languages,
            self.config.prefer_hash_match if prefer_hash_match is None else prefer_hash_match,
            self.config.ranking_policy,
        )

    def fetch_subtitle(
        self,
        candidate: SubtitleCandidate,
        session: Session | None = None,
    ) -> SubtitlePayload:
        """
        候補の字幕を取得

        Args:
            candidate: 選択した候補
            session: fetch_mode が "rpc" の場合に必要

        Raises:
            TransportError: ネットワークエラー
            DecodeError: 展開/デコード失敗
        """
        if self.config.fetch_mode == "rpc":
            if session is None:
                raise ValueError("fetch_mode 'rpc' requires a session")
            return self.network_retry(self.id_fetcher.fetch)(session, candidate.id, candidate.encoding)
        return self.network_retry(self.subtitle_fetcher.fetch)(candidate.download_url, candidate.encoding)

    def execute(
        self,
        file_path: str | Path,
        progress_callback: Callable[[str, float], None] | None = None,
    ) -> FindSubtitleResult:
        """
        メイン実行フロー

        Args:
            file_path: 動画ファイルのパス
            progress_callback: 進捗コールバック (stage: str, progress: float)

        Returns:
            FindSubtitleResult（候補がなければ chosen/payload は None）
        """
        start_time = time.time()
        path = Path(file_path)

        def update_progress(stage: str, progress: float) -> None:
            if progress_callback:
                progress_callback(stage, progress)

        # Phase 1: 指紋計算（ネットワーク不要なのでログイン前に行う）
        update_progress("指紋を計算中...", 0.1)
        fingerprint = self.fingerprint(path)

        with self.login_session() as session:
            # Phase 2: 検索
            update_progress("字幕を検索中...", 0.3)
            found = self.search(session, fingerprint)

            # Phase 3: 選択
            update_progress("候補を選択中...", 0.6)
            ranked = self.select_all(found)
            chosen = ranked[0] if ranked else None

            # Phase 4: 取得
            payload = None
            if chosen is not None:
                update_progress("字幕をダウンロード中...", 0.8)
                payload = self.fetch_subtitle(chosen, session)

        update_progress("完了", 1.0)
        return FindSubtitleResult(
            file_path=path,
            fingerprint=fingerprint,
            candidates=ranked,
            chosen=chosen,
            payload=payload,
            processing_time_sec=time.time() - start_time,
        )
