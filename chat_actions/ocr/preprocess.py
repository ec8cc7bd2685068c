"""Screenshot preparation for OCR.

Phone screenshots are small, anti-aliased and often use light text on
tinted backgrounds, so they are converted to grayscale, upscaled and
contrast-equalized before Tesseract sees them.
"""

import cv2
import numpy as np

from chat_actions.utils.logger import get_logger

logger = get_logger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an RGB or RGBA image to grayscale; grayscale passes through."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)


def upscale(image: np.ndarray, factor: float) -> np.ndarray:
    """Resize an image by ``factor`` with cubic interpolation.

    Factors at or below 1.0 return the image unchanged.
    """
    if factor <= 1.0:
        return image
    return cv2.resize(
        image, None, fx=factor, fy=factor, interpolation=cv2.INTER_CUBIC
    )


def apply_clahe(
    gray: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8
) -> np.ndarray:
    """Enhance local contrast with CLAHE on a grayscale image."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(gray)


def prepare_screenshot(image: np.ndarray, scale: float = 2.0) -> np.ndarray:
    """Run the full screenshot preparation chain.

    Args:
        image: RGB, RGBA or grayscale screenshot as a uint8 array.
        scale: Upscaling factor applied after grayscale conversion.

    Returns:
        Grayscale uint8 image ready for OCR.
    """
    gray = to_gray(image)
    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    result = apply_clahe(upscale(gray, scale))
    logger.debug("Prepared screenshot %s -> %s", image.shape, result.shape)
    return result
