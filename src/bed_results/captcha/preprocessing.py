"""Image preprocessing applied to captcha screenshots before OCR."""

import io

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from ..config.logger import logger


def is_valid_image(image: bytes) -> bool:
    return bool(image) and len(image) > 0


def preprocess_for_ocr(image: bytes) -> bytes:
    """Grayscale, stretch contrast and sharpen the captcha, re-encoded as PNG.

    Returns the original bytes unchanged when they cannot be decoded.
    """
    try:
        with Image.open(io.BytesIO(image)) as img:
            gray = ImageOps.grayscale(img)
            normalized = ImageOps.autocontrast(gray)
            sharpened = normalized.filter(ImageFilter.SHARPEN)

            buffer = io.BytesIO()
            sharpened.save(buffer, format="PNG")
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("captcha_preprocessing_failed", error=str(e))
        return image
