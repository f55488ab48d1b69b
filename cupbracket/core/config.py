from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CUP_")

    STATE_FILE: str = "data/tournament_state.json"
    STORAGE_KEY: str = "FOOTBALL_TOURNAMENT_DATA"
    EXPORT_FILENAME_PREFIX: str = "football_tournament"
    BRACKET_SEED: Optional[int] = None # Set for reproducible draws

    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

settings = Settings()
