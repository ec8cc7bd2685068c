"""Configuration management for the chat actions service.

Loads and validates YAML configuration with defaults for the language
model, OCR, database and cookie settings. Secrets such as the OpenAI
API key come from the environment (or a local ``.env`` file).
"""

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class LLMConfig(BaseModel):
    """Configuration for the hosted language models."""

    title_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o"
    image_detail: str = "high"
    api_key: str | None = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    base_url: str | None = None


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 6
    upscale: float = 2.0
    max_workers: int = 4
    fetch_timeout: float = 20.0
    # Hosts remote images may be fetched from; None allows any host.
    allowed_hosts: list[str] | None = None


class DatabaseConfig(BaseModel):
    """Configuration for the chat database."""

    url: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///chat.db")
    )
    echo: bool = False


class CookieConfig(BaseModel):
    """Configuration for the preference cookies."""

    name: str = "model-id"
    max_age: int | None = None


class AppConfig(BaseModel):
    """Top-level application configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cookie: CookieConfig = Field(default_factory=CookieConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to the ``CHAT_ACTIONS_CONFIG`` environment variable,
            then configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path(os.getenv("CHAT_ACTIONS_CONFIG", DEFAULT_CONFIG_PATH))

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
