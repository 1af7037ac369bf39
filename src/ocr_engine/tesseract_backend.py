"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).
It turns a pre-processed invoice image into text plus a confidence score.

Features:
    - Inter-word spacing preserved (column gaps carry meaning downstream)
    - Mean word confidence as the document confidence
    - Configurable Tesseract parameters

Requirements:
    - Tesseract OCR installed on the system, with the "fra" and "eng" data
    - pytesseract Python package

Author: ML Engineering Team
"""

import io
import time
from typing import Dict, List

import pytesseract
from PIL import Image, UnidentifiedImageError

from config import get_config
from src.extraction.extraction_result import RawDocument
from src.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Tesseract must be installed on the system for this to work.

    Attributes:
        language: Tesseract language codes (e.g., "fra+eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        preserve_interword_spaces: Keep runs of spaces between words

    Example:
        >>> backend = TesseractBackend()
        >>> document = backend.recognize(png_bytes)
        >>> print(f"{document.confidence:.1f}%")
    """

    def __init__(self) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.tesseract.lang", "fra+eng")
        self.psm = get_config("ocr.tesseract.psm", 6)
        self.oem = get_config("ocr.tesseract.oem", 1)
        self.preserve_interword_spaces = get_config(
            "ocr.tesseract.preserve_interword_spaces", 1
        )
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check if the Tesseract binary is available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
            logger.info(f"Tesseract version: {version}")
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}",
            f"-c preserve_interword_spaces={self.preserve_interword_spaces}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def recognize(self, image_bytes: bytes) -> RawDocument:
        """
        Recognize the text of an image.

        Args:
            image_bytes: Encoded image (PNG, JPEG, ...).

        Returns:
            RawDocument with the recognized text and mean word confidence.

        Raises:
            OCRProcessingError: If the image cannot be read or OCR fails.
        """
        start_time = time.time()

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise OCRProcessingError("image", f"Failed to load image: {e}")

        config = self._build_config()
        logger.debug(f"Running Tesseract OCR (config: {config})")

        try:
            text = pytesseract.image_to_string(image, lang=self.language, config=config)
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=config,
                output_type=pytesseract.Output.DICT
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        confidence = self._mean_confidence(data)
        logger.info(
            f"OCR completed: {len(text.splitlines())} lines, "
            f"confidence: {confidence:.1f}% "
            f"({time.time() - start_time:.2f}s)"
        )
        return RawDocument(text=text, confidence=confidence)

    @staticmethod
    def _mean_confidence(data: Dict[str, List]) -> float:
        """
        Mean confidence of the recognized words.

        Tesseract reports -1 for non-word elements; those are ignored.
        """
        confidences = []
        for text, conf in zip(data.get('text', []), data.get('conf', [])):
            if not str(text).strip():
                continue
            value = float(conf)
            if value >= 0:
                confidences.append(value)

        if not confidences:
            return 0.0
        return round(sum(confidences) / len(confidences), 2)
