"""OpenAI client construction and response helpers."""

from openai import OpenAI
from openai.types.chat import ChatCompletion

from chat_actions.utils.config import LLMConfig


def get_client(config: LLMConfig | None = None) -> OpenAI:
    """Build an OpenAI client.

    When no API key is configured the SDK falls back to the
    ``OPENAI_API_KEY`` environment variable.
    """
    config = config or LLMConfig()
    return OpenAI(api_key=config.api_key, base_url=config.base_url)


def first_content(response: ChatCompletion) -> str | None:
    """Return the text of the first choice, or ``None`` if there is none."""
    if not response.choices:
        return None
    return response.choices[0].message.content
