"""Tests for the model preference cookie."""

from http.cookies import SimpleCookie

from fastapi import Response

from chat_actions.actions.preferences import get_model_id, save_model_id
from chat_actions.utils.config import CookieConfig


def _cookies_from(response: Response) -> dict[str, str]:
    jar = SimpleCookie()
    for name, value in response.raw_headers:
        if name == b"set-cookie":
            jar.load(value.decode("latin-1"))
    return {key: morsel.value for key, morsel in jar.items()}


class TestSaveModelId:
    """Tests for writing the model cookie."""

    def test_sets_named_cookie(self) -> None:
        response = Response()
        save_model_id(response, "gpt-4o-mini")
        assert _cookies_from(response) == {"model-id": "gpt-4o-mini"}

    def test_custom_cookie_name(self) -> None:
        response = Response()
        save_model_id(response, "gpt-4o", CookieConfig(name="chat-model"))
        assert "chat-model" in _cookies_from(response)

    def test_no_validation_of_identifier(self) -> None:
        response = Response()
        save_model_id(response, "not-a-real-model")
        assert _cookies_from(response)["model-id"] == "not-a-real-model"


class TestRoundTrip:
    """Writing then reading returns the exact identifier."""

    def test_round_trip(self) -> None:
        response = Response()
        save_model_id(response, "gpt-4o-2024-08-06")
        assert get_model_id(_cookies_from(response)) == "gpt-4o-2024-08-06"

    def test_missing_cookie_returns_none(self) -> None:
        assert get_model_id({}) is None
