"""Tesseract OCR engine wrapper for transaction screenshots.

Provides plain-text extraction with an average word confidence, which
is all the transaction prompt needs from a screenshot.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Recognized text for a single image."""

    text: str
    language: str
    confidence: float


class TesseractEngine:
    """Wrapper around Tesseract OCR.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Default page segmentation mode. Mode 6 (single uniform
            block) suits app screenshots better than full page analysis.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 6,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int | None = None,
    ) -> OCRResult:
        """Extract text from an image.

        Args:
            image: Input image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode override.

        Returns:
            OCRResult with the recognized text and mean confidence in [0, 1].

        Raises:
            pytesseract.TesseractError: If Tesseract fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm if psm is not None else self.psm}"

        pil_image = Image.fromarray(image)
        text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
        data = pytesseract.image_to_data(
            pil_image,
            lang=lang,
            config=config,
            output_type=pytesseract.Output.DICT,
        )

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            len(confidences),
            avg_conf,
        )
        return OCRResult(text=text.strip(), language=lang, confidence=avg_conf)
