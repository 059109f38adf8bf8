"""OpenAI client utility for the reviewing agent."""

from openai import AsyncOpenAI

from src.utils.config import get_openai_api_key, get_openai_base_url

MAX_RETRIES = 2


class OpenAIClient:
    """A client for interacting with the OpenAI API."""

    def __init__(self):
        """Initialize the async OpenAI client.

        Raises:
            ValueError: If no API key is found in env
        """
        api_key = get_openai_api_key()
        if not api_key:
            raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY environment variable")
        base_url = get_openai_base_url()

        self.async_client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=MAX_RETRIES)


_global_client: OpenAIClient | None = None


def get_async_openai_client() -> AsyncOpenAI:
    """Get or create the global OpenAI client and return its async client."""
    global _global_client
    if _global_client is None:
        _global_client = OpenAIClient()
    return _global_client.async_client
