from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Upstream Hosts
    YOUTUBE_BASE_URL: str = "https://www.youtube.com"
    SPOTIFY_CLIENT_BASE_URL: str = "https://spclient.wg.spotify.com"
    INNERTUBE_CLIENT_VERSION: str = "2.20260105.01.00"

    # Transport Settings
    HTTP_TIMEOUT: float = 30.0
    USER_AGENT: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

    # Page Scanning
    PAGE_SCAN_LIMIT: int = 500_000

    # System Settings
    LOG_LEVEL: str = "INFO"

    # Paths
    OUTPUT_DIR: str = "outputs"

    # Raw Credentials from Env (CLI only; the engine takes them per call)
    SPOTIFY_AUTHORIZATION: Optional[str] = None
    SPOTIFY_CLIENT_TOKEN: Optional[str] = None
    YOUTUBE_COOKIES: Optional[str] = None
    YOUTUBE_TRANSCRIPT_PARAMS: Optional[str] = None
    YOUTUBE_VISITOR_DATA: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env", 
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
