from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Meuble Spec Service"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    host: str = "127.0.0.1"
    port: int = 8000

    max_code_length: int = 200  # characters
    presets_file: Optional[str] = None  # JSON list replacing the built-in presets
    default_price_per_m3: float = 1500.0  # EUR, fallback tier

    generation_url: str = "http://localhost:8001/api/generate"
    generation_timeout: float = 60.0  # seconds
    generation_retries: int = 2
    generation_backoff: float = 0.5  # seconds, doubled per retry
    generation_cache_size: int = 256  # finished results kept in memory

    configurations_dir: str = "data/configurations"

    model_config = SettingsConfigDict(env_prefix="MEUBLE_")


settings = Settings()
