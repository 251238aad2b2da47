"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Repo Details Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # GitHub API
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_USERNAME: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
    GITHUB_RAW_URL: str = "https://raw.githubusercontent.com"
    GITHUB_TIMEOUT_SECONDS: float = 30.0
    USER_AGENT: str = "Apollo-GraphQL-Server"

    # Detail requests admitted concurrently (GitHub secondary rate limits)
    MAX_CONCURRENT_FETCH_DETAILS: int = 2

    # Repository list page size; GitHub caps `first` at 100
    MAX_LIST_REPOS: int = 100

    # Browser client origins
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
