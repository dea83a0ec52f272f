from .openai_client import GlossRequestMetadata, OpenAIGlossClient

__all__ = ["GlossRequestMetadata", "OpenAIGlossClient"]
