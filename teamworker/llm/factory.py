import logging
import os
from typing import Any

from dotenv import find_dotenv, load_dotenv

from teamworker.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_PROVIDER = "anthropic"  # Options: "anthropic", "openai", "google_genai", "ollama"
DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
    "google_genai": "gemini-2.0-flash",
    "ollama": "llama3.1",
}

# Environment variable holding the API key for each provider
API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "google_genai": "GOOGLE_API_KEY",
}


def get_required_env(key: str) -> str:
    """Get required environment variable or raise a configuration error.

    Args:
        key: Environment variable name.

    Returns:
        The environment variable value.

    Raises:
        ConfigurationError: If the environment variable is not set.
    """
    value = os.getenv(key)
    if not value:
        raise ConfigurationError(f"Required environment variable '{key}' is not set")
    return value


def get_chat_model(
    temperature: float = 0,
    provider: str | None = None,
    model: str | None = None,
) -> Any:
    """Initialize a LangChain chat model for a supervisor.

    Uses LangChain's universal init_chat_model() factory so every provider goes
    through a single code path.

    Args:
        temperature: LLM temperature setting (0-1).
        provider: LLM provider. If not specified, uses the LLM_PROVIDER env var
                 or defaults to "anthropic".
        model: Model identifier. If not specified, uses the LLM_MODEL env var
               or the provider default.

    Returns:
        LangChain chat model instance supporting .bind_tools() and .ainvoke().

    Raises:
        ConfigurationError: If the provider is invalid or its API key is missing.

    Example:
        >>> llm = get_chat_model(temperature=0.2, provider="openai")
        >>> supervisor = SupervisorHandle(llm=llm, name="research_lead")
    """
    from langchain.chat_models import init_chat_model

    load_dotenv(find_dotenv())

    provider = (provider or os.getenv("LLM_PROVIDER") or DEFAULT_PROVIDER).lower()
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(
            f"Invalid provider '{provider}'. "
            f"Must be one of: {', '.join(DEFAULT_MODELS.keys())}"
        )

    model = model or os.getenv("LLM_MODEL") or DEFAULT_MODELS[provider]

    model_kwargs: dict[str, Any] = {"temperature": temperature}
    if provider in API_KEY_ENV:
        model_kwargs["api_key"] = get_required_env(API_KEY_ENV[provider])
    if provider == "openai" and (base_url := os.getenv("OPENAI_BASE_URL")):
        model_kwargs["base_url"] = base_url
    if provider == "ollama" and (base_url := os.getenv("OLLAMA_BASE_URL")):
        model_kwargs["base_url"] = base_url

    logger.debug(
        f"Initializing LangChain {provider} chat model with model={model}, "
        f"temperature={temperature}"
    )
    llm = init_chat_model(model=model, model_provider=provider, **model_kwargs)
    logger.info(f"Created {provider} chat model: {type(llm).__name__}")
    return llm
