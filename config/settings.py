"""設定管理"""

from functools import lru_cache

from pydantic_settings import BaseSettings

from src.domain.entities import Credentials


class Settings(BaseSettings):
    """アプリケーション設定"""

    # OpenSubtitles XML-RPC
    OPENSUBTITLES_API_URL: str = "https://api.opensubtitles.org/xml-rpc"
    # 空なら匿名ログイン
    OPENSUBTITLES_USERNAME: str = ""
    OPENSUBTITLES_PASSWORD: str = ""
    LOGIN_LANGUAGE: str = "en"
    # 登録済みユーザーエージェント
    CLIENT_ID: str = "TemporaryUserAgent"

    # Matching
    # 優先順のカンマ区切り（ISO 639-2）
    SUBTITLE_LANGUAGES: str = "eng"
    PREFER_HASH_MATCH: bool = True
    # ハッシュ一致区分内のタイブレーク順（downloads / rating / id）
    RANKING_TIE_BREAK: str = "downloads,rating,id"
    # "http": SubDownloadLink から取得 / "rpc": DownloadSubtitles で取得
    FETCH_MODE: str = "http"

    # Timeouts & retries
    RPC_TIMEOUT_SEC: float = 10.0
    DOWNLOAD_TIMEOUT_SEC: float = 30.0
    # サーバー側トークンは無操作15分で失効
    KEEPALIVE_INTERVAL_SEC: float = 600.0
    # 検索・取得の TransportError 再試行回数（1 = 再試行なし）
    TRANSPORT_RETRY_ATTEMPTS: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"

    def language_list(self) -> list[str]:
        """SUBTITLE_LANGUAGES を優先順のリストに変換"""
        return [code.strip().lower() for code in self.SUBTITLE_LANGUAGES.split(",") if code.strip()]

    def credentials(self) -> Credentials:
        return Credentials(
            username=self.OPENSUBTITLES_USERNAME,
            password=self.OPENSUBTITLES_PASSWORD,
            language=self.LOGIN_LANGUAGE,
            client_id=self.CLIENT_ID,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """シングルトンで設定を取得"""
    return Settings()
