"""Persist the user's selected chat model in a cookie."""

from collections.abc import Mapping

from fastapi import Response

from chat_actions.utils.config import CookieConfig


def save_model_id(
    response: Response, model: str, config: CookieConfig | None = None
) -> None:
    """Store ``model`` in the model cookie, replacing any previous value.

    The identifier is stored as given.
    """
    config = config or CookieConfig()
    response.set_cookie(
        config.name,
        model,
        max_age=config.max_age,
        path="/",
        samesite="lax",
    )


def get_model_id(
    cookies: Mapping[str, str], config: CookieConfig | None = None
) -> str | None:
    """Read the stored model identifier from request cookies."""
    config = config or CookieConfig()
    return cookies.get(config.name)
