from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    strava_client_id: str = ""
    strava_client_secret: str = ""
    strava_refresh_token: str = ""
    data_dir: str = "docs/data"
    gear_map_path: Optional[str] = None
    fetch_per_page: int = 100
    fetch_max_pages: int = 10
    refresh_hour: int = 3
    rolling_window: int = 5  # centered window for pace / HR trend lines

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def has_strava_credentials(self) -> bool:
        return bool(
            self.strava_client_id
            and self.strava_client_secret
            and self.strava_refresh_token
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
