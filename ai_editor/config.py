"""
Application configuration management.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis (conversation history)
    redis_url: str

    # Azure DevOps repository the assistant edits
    azure_devops_pat: str
    azure_devops_org: str
    azure_devops_project: str
    azure_devops_repository: str
    azure_devops_branch: str = "main"

    # LLM (any OpenAI-compatible endpoint, DeepSeek by default)
    openai_api_key: str
    openai_base_url: Optional[str] = "https://api.deepseek.com"
    openai_model: str = "deepseek-chat"
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_deployment: Optional[str] = None
    llm_temperature: float = 0.2
    llm_max_tokens: int = 4000

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    history_limit: int = 20
    session_ttl_seconds: int = 86400
    store_max_retries: int = 3
    context_max_files: int = 20
    context_max_file_bytes: int = 20000

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
