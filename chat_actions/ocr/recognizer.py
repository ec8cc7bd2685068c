"""Concurrent OCR over a batch of screenshots.

Each recognition acquires its own Tesseract worker for the duration of
the call, so images can be processed in parallel without sharing
engine state. A failed image yields ``None`` instead of aborting the
batch.
"""

from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from threading import BoundedSemaphore, Lock

from chat_actions.utils.config import OCRConfig
from chat_actions.utils.logger import get_logger

from .image_loader import load_image
from .preprocess import prepare_screenshot
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)


class ScreenshotRecognizer:
    """Run OCR over image references, one worker per call.

    Args:
        config: OCR configuration.
    """

    def __init__(self, config: OCRConfig | None = None) -> None:
        self.config = config or OCRConfig()
        self._slots = BoundedSemaphore(max(1, self.config.max_workers))
        self._lock = Lock()
        self._active = 0

    @property
    def active_workers(self) -> int:
        """Number of workers currently checked out."""
        return self._active

    @contextmanager
    def worker(self) -> Iterator[TesseractEngine]:
        """Acquire a Tesseract worker slot and release it on exit.

        At most ``max_workers`` Tesseract processes run at once.
        """
        self._slots.acquire()
        with self._lock:
            self._active += 1
        try:
            yield TesseractEngine(
                tesseract_cmd=self.config.tesseract_cmd,
                default_lang=self.config.default_lang,
                psm=self.config.psm,
            )
        finally:
            with self._lock:
                self._active -= 1
            self._slots.release()

    def recognize(self, ref: str) -> str | None:
        """Recognize the text of one image.

        Args:
            ref: Image reference (URL, data URL or file path).

        Returns:
            Recognized text, or ``None`` if loading or OCR failed.
        """
        try:
            with self.worker() as engine:
                image = load_image(
                    ref,
                    timeout=self.config.fetch_timeout,
                    allowed_hosts=self.config.allowed_hosts,
                )
                prepared = prepare_screenshot(image, scale=self.config.upscale)
                return engine.extract_text(prepared).text
        except Exception as exc:
            logger.warning("OCR failed for %s: %s", _short(ref), exc)
            return None

    def recognize_all(self, refs: Sequence[str]) -> list[str | None]:
        """Recognize several images concurrently.

        Returns:
            One entry per reference, in input order.
        """
        if not refs:
            return []
        workers = max(1, min(self.config.max_workers, len(refs)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            texts = list(pool.map(self.recognize, refs))
        logger.info(
            "OCR finished for %d images (%d failed)",
            len(texts),
            sum(t is None for t in texts),
        )
        return texts


def _short(ref: str, limit: int = 60) -> str:
    return ref if len(ref) <= limit else ref[: limit - 3] + "..."
