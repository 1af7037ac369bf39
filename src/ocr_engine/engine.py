"""
Main OCR Engine Module.

This module provides the main OCREngine class that serves as the
unified interface for OCR operations. The extraction pipeline only needs
``recognize(image_bytes) -> RawDocument``; the backend behind it is
chosen from configuration.

Usage:
    from src.ocr_engine import OCREngine

    engine = OCREngine()
    document = engine.recognize(png_bytes)

    print(document.text)
    print(document.confidence)

Author: ML Engineering Team
"""

from typing import Optional

from config import get_config
from src.extraction.extraction_result import RawDocument
from src.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from src.utils.logger import get_logger
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Main OCR engine providing a unified interface for text recognition.

    Supported Backends:
        - tesseract: Tesseract OCR (default)

    Attributes:
        backend_name: Name of the active OCR backend
        backend: The active OCR backend instance

    Example:
        >>> engine = OCREngine()
        >>> document = engine.recognize(png_bytes)
        >>> print(document.text)
    """

    # Supported backend engines
    SUPPORTED_BACKENDS = ['tesseract']

    def __init__(self, backend: Optional[str] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend to use. If None, uses configuration.

        Raises:
            OCREngineNotAvailableError: If the backend is unknown or missing.
        """
        self.backend_name = backend or get_config("ocr.engine", "tesseract")

        # Normalize backend name
        if self.backend_name == "pytesseract":
            self.backend_name = "tesseract"

        self.backend = self._initialize_backend()

        logger.info(f"OCR Engine initialized with backend: {self.backend_name}")

    def _initialize_backend(self) -> TesseractBackend:
        """
        Initialize the selected OCR backend.

        Raises:
            OCREngineNotAvailableError: If backend cannot be initialized.
        """
        if self.backend_name == "tesseract":
            return TesseractBackend()

        raise OCREngineNotAvailableError(
            f"{self.backend_name} (supported: {', '.join(self.SUPPORTED_BACKENDS)})"
        )

    def recognize(self, image_bytes: bytes) -> RawDocument:
        """
        Recognize the text of a pre-processed image.

        Args:
            image_bytes: Encoded image bytes.

        Returns:
            RawDocument (text + confidence).

        Raises:
            OCRProcessingError: If recognition fails.
        """
        if not image_bytes:
            raise OCRProcessingError("image", "Empty image buffer")

        logger.debug(f"Recognizing text using {self.backend_name} backend")
        return self.backend.recognize(image_bytes)
