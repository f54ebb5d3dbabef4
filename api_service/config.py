"""Settings for the inspection scoring API."""
from pydantic_settings import BaseSettings
from typing import List
import logging
import os


class APIConfig(BaseSettings):
    """Environment-driven settings; scoring policy itself lives in config/business_rules.yaml."""

    service_name: str = "vehicle-inspection-api"
    service_version: str = "1.0.0"

    # Server
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    # CORS
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "json")  # json or console

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def log_level_number(self) -> int:
        level = getattr(logging, self.log_level.upper(), None)
        return level if isinstance(level, int) else logging.INFO


api_config = APIConfig()
