"""Generate a conversation title from the user's first message."""

import json
from typing import Any

from openai import OpenAI

from chat_actions.llm.client import first_content, get_client
from chat_actions.utils.config import LLMConfig
from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)

TITLE_SYSTEM_PROMPT = """
- you will generate a short title based on the first message a user begins a conversation with
- ensure it is not more than 80 characters long
- the title should be a summary of the user's message
- do not use quotes or colons"""


def generate_title_from_user_message(
    message: dict[str, Any],
    client: OpenAI | None = None,
    config: LLMConfig | None = None,
) -> str:
    """Ask the title model for a short conversation title.

    The reply is returned exactly as generated; the length and
    punctuation rules live only in the system prompt.

    Args:
        message: User message as a ``{"role": ..., "content": ...}`` dict.
        client: OpenAI client. Built from ``config`` when omitted.
        config: Language model settings.

    Returns:
        The generated title text.
    """
    config = config or LLMConfig()
    client = client or get_client(config)

    response = client.chat.completions.create(
        model=config.title_model,
        messages=[
            {"role": "system", "content": TITLE_SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(message)},
        ],
    )
    title = first_content(response) or ""
    logger.debug("Generated title %r", title)
    return title
