"""Extract credit-card transactions from banking app screenshots.

The screenshots are first run through Tesseract so the model gets both
the raw pixels and a text transcription. A single request then goes to a
vision-capable chat model in JSON mode. The parsed payload is returned
as-is; it is not validated against :class:`~chat_actions.api.schemas.Transaction`.
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any

import openai
from openai import OpenAI

from chat_actions.llm.client import first_content, get_client
from chat_actions.ocr.image_loader import is_data_url, to_image_url
from chat_actions.ocr.recognizer import ScreenshotRecognizer
from chat_actions.utils.config import AppConfig
from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)

TRANSACTIONS_PROMPT = """
I want your help with organizing my finances. I am sharing screenshots of my \
credit card transactions from my banking app. So that no transaction is missed, \
every screenshot repeats at least one transaction from the previous screenshot. \
Use that overlap to line the screenshots up and list each transaction only once: \
a transaction that appears in several screenshots must not be counted twice.
Give me the transactions as a JSON object with a single key "transactions" whose \
value is a list of objects with these fields -
* date (yyyy/MM/dd)
* description
* amount (negative for refunds and payments)
"""

COUNT_PROMPT = """
I am sharing screenshots of my credit card transactions from my banking app. \
Every screenshot repeats at least one transaction from the previous screenshot; \
count each transaction only once. Give me a JSON object where each key is a date \
(yyyy/MM/dd) and each value is the number of transactions on that date.
"""

OCR_PLACEHOLDER = "(no text could be recognized)"


def build_transaction_prompt(
    ocr_texts: Sequence[str | None],
    expected_counts: Mapping[str, int] | None = None,
) -> str:
    """Assemble the extraction prompt from per-screenshot OCR text.

    Args:
        ocr_texts: OCR output per screenshot in upload order. ``None``
            marks a screenshot whose OCR failed.
        expected_counts: Optional rough number of transactions per date.

    Returns:
        The full prompt text.
    """
    sections = [TRANSACTIONS_PROMPT]

    if ocr_texts:
        sections.append(
            "To help you read the screenshots, here is the text recognized "
            "in each one, in the same order as the images:"
        )
        for i, text in enumerate(ocr_texts, 1):
            body = text if text is not None else OCR_PLACEHOLDER
            sections.append(f"### Screenshot {i}\n{body}")

    if expected_counts:
        rows = "\n".join(
            f"| {day} | {count} |" for day, count in expected_counts.items()
        )
        sections.append(
            "Here's a rough estimate of the number of transactions to expect "
            "for each date. It is only an indication and may be off.\n"
            "| Date | Number of Transactions |\n"
            "|------|------------------------|\n" + rows
        )

    return "\n\n".join(s.strip("\n") for s in sections) + "\n"


def build_image_parts(
    image_refs: Sequence[str], detail: str = "high"
) -> list[dict[str, Any]]:
    """Build one ``image_url`` content part per image reference."""
    parts = []
    for ref in image_refs:
        logger.info("Attaching image: %s", "<data url>" if is_data_url(ref) else ref)
        parts.append(
            {
                "type": "image_url",
                "image_url": {"url": to_image_url(ref), "detail": detail},
            }
        )
    return parts


def _complete_json(
    client: OpenAI, model: str, prompt: str, image_parts: list[dict[str, Any]]
) -> Any | None:
    """Send one JSON-mode request and return the parsed reply.

    Returns ``None`` when the API call fails, the reply is empty or the
    reply is not valid JSON.
    """
    try:
        response = client.chat.completions.create(
            model=model,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "user",
                    "content": [{"type": "text", "text": prompt}, *image_parts],
                }
            ],
        )
    except openai.OpenAIError as exc:
        logger.error("Error processing images: %s", exc)
        return None

    logger.info("Received response from the completion API")
    content = first_content(response)
    if not content:
        logger.warning("Completion API returned no content")
        return None

    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("Completion API returned malformed JSON: %s", exc)
        return None


def extract_transactions(
    image_refs: Sequence[str],
    client: OpenAI | None = None,
    recognizer: ScreenshotRecognizer | None = None,
    config: AppConfig | None = None,
    expected_counts: Mapping[str, int] | None = None,
) -> Any | None:
    """Extract transactions from a set of screenshots.

    Args:
        image_refs: Image URLs, data URLs or local file paths, in order.
        client: OpenAI client. Built from ``config`` when omitted.
        recognizer: OCR runner. Built from ``config`` when omitted.
        config: Application configuration.
        expected_counts: Optional per-date transaction counts to hint at.

    Returns:
        The parsed JSON object from the model, or ``None`` if the
        completion request failed or its reply was not valid JSON.
    """
    config = config or AppConfig()
    client = client or get_client(config.llm)
    recognizer = recognizer or ScreenshotRecognizer(config.ocr)

    logger.info("Starting to process %d images", len(image_refs))
    ocr_texts = recognizer.recognize_all(image_refs)
    prompt = build_transaction_prompt(ocr_texts, expected_counts)
    image_parts = build_image_parts(image_refs, detail=config.llm.image_detail)

    return _complete_json(client, config.llm.vision_model, prompt, image_parts)


def count_transactions_by_date(
    image_refs: Sequence[str],
    client: OpenAI | None = None,
    config: AppConfig | None = None,
) -> Any | None:
    """Ask the model how many transactions appear on each date.

    The result can be fed back into :func:`extract_transactions` as
    ``expected_counts``. Error handling matches ``extract_transactions``.
    """
    config = config or AppConfig()
    client = client or get_client(config.llm)

    logger.info("Starting to count transactions in %d images", len(image_refs))
    image_parts = build_image_parts(image_refs, detail=config.llm.image_detail)
    return _complete_json(client, config.llm.vision_model, COUNT_PROMPT, image_parts)
