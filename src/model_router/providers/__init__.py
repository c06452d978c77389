"""Provider adapters and resolver factories for model_router."""

from .anthropic import ANTHROPIC, anthropic_provider
from .gemini import GEMINI, gemini_provider
from .hosted import GROQ, MISTRAL, OPENROUTER, groq_provider, mistral_provider, openrouter_provider
from .ollama import OLLAMA, ollama_provider
from .openai import OPENAI, openai_compatible_adapter, openai_provider

__all__ = [
    "ANTHROPIC",
    "GEMINI",
    "GROQ",
    "MISTRAL",
    "OLLAMA",
    "OPENAI",
    "OPENROUTER",
    "anthropic_provider",
    "gemini_provider",
    "groq_provider",
    "mistral_provider",
    "ollama_provider",
    "openai_compatible_adapter",
    "openai_provider",
    "openrouter_provider",
]
