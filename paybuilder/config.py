"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./paybuilder.db"
    log_level: str = "INFO"
    default_config_name: str = "default"  # ServicesContainer key used by the API
    mock_latency_ms: int = 50  # Simulated gateway latency
    mock_supports_hosted_payments: bool = True

    model_config = {"env_prefix": "PAYBUILDER_", "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
