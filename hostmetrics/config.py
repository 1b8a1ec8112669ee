from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # HTTP listener
    hostmetrics_host: str = "0.0.0.0"
    hostmetrics_port: int = 3000

    # Logging
    hostmetrics_log_level: str = "info"
    hostmetrics_log_format: str = "json"  # "json" or "console"

    # CORS
    hostmetrics_cors_origins: str = "*"

    # Seconds a request may wait for a provider guard before giving up
    hostmetrics_guard_timeout: float = 10.0

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
