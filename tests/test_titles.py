"""Tests for conversation title generation."""

import json
from unittest.mock import MagicMock

from chat_actions.actions.titles import (
    TITLE_SYSTEM_PROMPT,
    generate_title_from_user_message,
)
from chat_actions.utils.config import LLMConfig

from conftest import make_completion

USER_MESSAGE = {"role": "user", "content": "How do I split a bill three ways?"}


class TestGenerateTitle:
    """Tests for generate_title_from_user_message."""

    def test_request_shape(self, openai_client: MagicMock) -> None:
        openai_client.chat.completions.create.return_value = make_completion(
            "Splitting a bill three ways"
        )

        generate_title_from_user_message(USER_MESSAGE, client=openai_client)

        _, kwargs = openai_client.chat.completions.create.call_args
        assert kwargs["model"] == "gpt-4o-mini"
        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": TITLE_SYSTEM_PROMPT}
        assert user["role"] == "user"
        assert json.loads(user["content"]) == USER_MESSAGE

    def test_system_prompt_rules(self) -> None:
        assert "80 characters" in TITLE_SYSTEM_PROMPT
        assert "quotes or colons" in TITLE_SYSTEM_PROMPT

    def test_returns_text_verbatim(self, openai_client: MagicMock) -> None:
        long_title = "A: " + "very " * 30 + "long title"
        openai_client.chat.completions.create.return_value = make_completion(long_title)

        title = generate_title_from_user_message(USER_MESSAGE, client=openai_client)

        assert title == long_title
        assert openai_client.chat.completions.create.call_count == 1

    def test_uses_configured_model(self, openai_client: MagicMock) -> None:
        generate_title_from_user_message(
            USER_MESSAGE,
            client=openai_client,
            config=LLMConfig(title_model="gpt-4.1-nano"),
        )
        _, kwargs = openai_client.chat.completions.create.call_args
        assert kwargs["model"] == "gpt-4.1-nano"
