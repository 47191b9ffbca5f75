from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    database_url: str = "sqlite:///./birth_lottery.db"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"

    # World Bank Open Data (free, no key required)
    world_bank_base_url: str = "https://api.worldbank.org/v2"
    world_bank_per_page: int = 20000
    birth_rate_year: int = 2023
    population_year: int = 2023
    gdp_year: int = 2024
    http_timeout_seconds: float = 30.0
    user_agent: str = "Birth-Lottery/1.0"

    # Dataset snapshot
    cache_ttl_seconds: int = 86400  # 24 hours

    # Scheduler
    scheduler_enabled: bool = True
    refresh_hour: int = 3

    # Rate limiting for draw endpoints (slowapi syntax)
    draw_rate_limit: str = "60/minute"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    class Config:
        env_file = ".env"


settings = Settings()
