"""
Main Input Handler Module.

This module provides the primary InputHandler class that turns an input
file into a RawDocument (OCR text + confidence). It detects the file type
and delegates to the appropriate collaborator:
    - .txt files are OCR text dumps, read as is
    - image files are pre-processed and recognized with the OCR engine

Usage:
    from src.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("invoice.png")

    # Collect a directory
    files = handler.collect_files("./invoices/")

Classes:
    InputHandler: Main class for file input handling
"""

from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from src.extraction.extraction_result import RawDocument
from src.utils.exceptions import (
    CorruptedFileError,
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)
from src.utils.helpers import get_file_extension, validate_file_exists
from src.utils.logger import get_logger
from .image_processor import ImageProcessor

# Initialize module logger
logger = get_logger(__name__)


class InputHandler:
    """
    Main input handler for invoice files.

    The OCR engine is only created when the first image is loaded, so
    text dumps can be processed on machines without Tesseract.

    Attributes:
        text_extensions: Extensions read as OCR text
        image_extensions: Extensions sent through pre-processing and OCR
        image_processor: ImageProcessor instance for image files

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("scan.txt", confidence=88.0)
        >>> print(document.text[:40])
    """

    # Supported file extensions
    TEXT_EXTENSIONS = ['.txt']
    IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp']

    def __init__(self, ocr_engine=None) -> None:
        """
        Initialize the InputHandler.

        Args:
            ocr_engine: Object with ``recognize(image_bytes) -> RawDocument``.
                If None, an OCREngine is created on first use.
        """
        self.text_extensions = {
            ext.lower() for ext in get_config("input.text_extensions", self.TEXT_EXTENSIONS)
        }
        self.image_extensions = {
            ext.lower() for ext in get_config("input.image_extensions", self.IMAGE_EXTENSIONS)
        }
        self.encoding = get_config("input.text_encoding", "utf-8")
        self.default_text_confidence = float(
            get_config("input.default_text_confidence", 100.0)
        )

        self.image_processor = ImageProcessor()
        self._ocr_engine = ocr_engine

        logger.debug(
            f"InputHandler initialized with extensions: "
            f"{sorted(self.text_extensions | self.image_extensions)}"
        )

    @property
    def supported_extensions(self) -> List[str]:
        return sorted(self.text_extensions | self.image_extensions)

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            from src.ocr_engine import OCREngine
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def detect_file_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the type of input file.

        Returns:
            File type string: 'text' or 'image'.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
        """
        ext = get_file_extension(filepath)
        if ext in self.text_extensions:
            return 'text'
        if ext in self.image_extensions:
            return 'image'
        raise UnsupportedFileTypeError(ext, self.supported_extensions)

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and is not empty.

        Raises:
            InputFileNotFoundError: If the file does not exist.
            UnsupportedFileTypeError: If the extension is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)
        if not validate_file_exists(path):
            raise InputFileNotFoundError(str(filepath))

        self.detect_file_type(path)

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        logger.debug(f"File validated: {filepath}")
        return path

    def load(self, filepath: Union[str, Path], confidence: Optional[float] = None) -> RawDocument:
        """
        Load an input file as a RawDocument.

        Args:
            filepath: Path to a .txt OCR dump or an invoice image.
            confidence: Confidence for text dumps (ignored for images,
                whose confidence comes from the OCR engine).

        Returns:
            RawDocument with the OCR text and confidence.

        Raises:
            InputError: If the file is missing, unsupported or unreadable.
            OCRError: If recognition fails.
        """
        path = self.validate_file(filepath)
        logger.info(f"Loading file: {path.name}")

        if self.detect_file_type(path) == 'text':
            try:
                text = path.read_text(encoding=self.encoding)
            except UnicodeDecodeError as e:
                raise CorruptedFileError(str(path), f"Not {self.encoding} text: {e}")
            if confidence is None:
                confidence = self.default_text_confidence
            return RawDocument(text=text, confidence=confidence)

        processed = self.image_processor.preprocess(path.read_bytes())
        return self.ocr_engine.recognize(processed)

    def collect_files(self, directory: Union[str, Path], recursive: bool = False) -> List[Path]:
        """
        Collect all supported files in a directory.

        Args:
            directory: Directory containing invoice files.
            recursive: Whether to search subdirectories.

        Returns:
            Sorted list of file paths.

        Raises:
            InputFileNotFoundError: If the directory does not exist.
            InputError: If the path is not a directory.
        """
        directory = Path(directory)

        if not directory.exists():
            raise InputFileNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files = sorted(
            path for path in directory.glob(pattern)
            if path.is_file() and get_file_extension(path) in self.supported_extensions
        )

        logger.info(f"Found {len(files)} files to process in {directory}")
        return files
