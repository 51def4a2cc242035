"""
Centralized settings and configuration for the Northern Mountains copilot.

Handles:
- Environment variable loading
- OpenAI API configuration
- Model fallback (GPT-4o → GPT-4o-mini)
- Cost tracking per model
- Session cache and backend service locations
"""
from typing import Dict, List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI API Configuration
    openai_api_key: str | None = None
    openai_org_id: str | None = None
    openai_base_url: str | None = None  # OpenAI-compatible providers

    # LLM Configuration
    llm_model: str = "gpt-4o"
    fallback_model: str | None = "gpt-4o-mini"
    default_temperature: float = 0.3
    default_max_output_tokens: int = 1000

    # Token Management
    max_tokens_per_request: int = 120000
    max_tool_rounds: int = 5

    # Model Pricing (per 1M tokens)
    model_pricing: Dict[str, Dict[str, float]] = {
        "gpt-4o": {"input": 2.50, "output": 10.00},
        "gpt-4o-mini": {"input": 0.15, "output": 0.60},
        "gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
    }

    # Session Cache
    session_cache_ttl: int = 3600  # 1 hour
    session_cache_maxsize: int = 1000

    # Backend services
    catalog_api_url: str = "http://localhost:5222"
    basket_api_url: str = "http://localhost:5221"
    product_image_base_url: str | None = None  # defaults to catalog_api_url
    http_timeout_seconds: float = 30.0

    # Prompting
    append_question_tags: bool = False

    # Server
    log_level: str = "INFO"
    # Session inspect/delete endpoints have no auth; keep off outside development
    session_endpoints_enabled: bool = False
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow case-insensitive env var names
        case_sensitive = False
        # Ignore extra environment variables
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_model_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Calculate cost for a model invocation.

    Args:
        model: Model name (e.g., "gpt-4o")
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens

    Returns:
        Cost in USD
    """
    if model not in settings.model_pricing:
        # Unknown models are priced as the most expensive one
        model = "gpt-4o"

    pricing = settings.model_pricing[model]
    input_cost = (input_tokens / 1_000_000) * pricing["input"]
    output_cost = (output_tokens / 1_000_000) * pricing["output"]

    return input_cost + output_cost
