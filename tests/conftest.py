"""Shared test fixtures for the chat actions test suite."""

import io
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest
from PIL import Image
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from chat_actions.db.session import get_session_factory, init_db


def make_completion(content: str | None) -> MagicMock:
    """Build a fake chat completion whose first choice holds ``content``."""
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def make_png_bytes(height: int = 60, width: int = 120) -> bytes:
    """Create a small PNG image as bytes."""
    img = Image.fromarray(np.full((height, width, 3), 255, dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_screenshot() -> np.ndarray:
    """Create a synthetic RGB screenshot with a dark text band."""
    image = np.full((120, 80, 3), 240, dtype=np.uint8)
    image[40:60, 10:70] = (30, 30, 30)
    return image


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "shot.png"
    path.write_bytes(make_png_bytes())
    return path


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    factory = get_session_factory(engine)
    with factory() as session:
        yield session


@pytest.fixture
def openai_client() -> MagicMock:
    """A stand-in OpenAI client returning an empty JSON object."""
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion("{}")
    return client


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
