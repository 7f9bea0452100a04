"""Analysis engine transports - OpenAI, Perplexity."""

from .base import EngineRequest, EngineTransport
from .openai_transport import OpenAITransport
from .perplexity_transport import PerplexityTransport

__all__ = ["EngineRequest", "EngineTransport", "OpenAITransport", "PerplexityTransport", "build_transport"]


def build_transport(config) -> EngineTransport:
    """Pick the transport named by ``config.analysis_provider``."""
    provider = (config.analysis_provider or "").lower()
    if provider == "openai":
        return OpenAITransport(config)
    if provider == "perplexity":
        return PerplexityTransport(config)
    raise ValueError(f"Unknown analysis provider: {config.analysis_provider}")
