"""
Image Processor Module.

This module prepares scanned invoice images for OCR:
    - Orientation correction (EXIF)
    - Width normalization (aspect ratio kept)
    - Grayscale, contrast stretch, denoising, sharpening
    - Binarization

Supports: JPG, JPEG, PNG, TIFF, BMP

Author: ML Engineering Team
"""

import io

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from config import get_config
from src.utils.exceptions import CorruptedFileError
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Pre-processor for invoice images.

    Sources at least ``high_resolution_width`` pixels wide are scaled down
    to ``high_resolution_target``; narrower ones are scaled to
    ``default_target`` (enlarging small scans helps Tesseract).

    Attributes:
        high_resolution_width: Width from which a source counts as high-res
        high_resolution_target: Target width for high-res sources
        default_target: Target width for other sources
        threshold: Binarization threshold (0-255)

    Example:
        >>> processor = ImageProcessor()
        >>> png_bytes = processor.preprocess(open("invoice.jpg", "rb").read())
    """

    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.high_resolution_width = get_config("preprocessing.high_resolution_width", 2000)
        self.high_resolution_target = get_config("preprocessing.high_resolution_target", 1240)
        self.default_target = get_config("preprocessing.default_target", 1748)
        self.autocontrast_cutoff = get_config("preprocessing.autocontrast_cutoff", 1)
        self.median_size = get_config("preprocessing.median_size", 3)
        self.unsharp_radius = get_config("preprocessing.unsharp.radius", 2)
        self.unsharp_percent = get_config("preprocessing.unsharp.percent", 150)
        self.unsharp_threshold = get_config("preprocessing.unsharp.threshold", 3)
        self.threshold = get_config("preprocessing.threshold", 140)

        logger.debug(
            f"ImageProcessor initialized (targets={self.high_resolution_target}/"
            f"{self.default_target}px, threshold={self.threshold})"
        )

    def preprocess(self, image_bytes: bytes) -> bytes:
        """
        Normalize an image for OCR.

        Args:
            image_bytes: Raw encoded image.

        Returns:
            PNG-encoded, fixed-width, binarized image.

        Raises:
            CorruptedFileError: If the bytes are not a readable image.
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.error(f"Failed to read image: {e}")
            raise CorruptedFileError("image buffer", str(e))

        original_size = image.size
        image = self._process_image(image)

        buffer = io.BytesIO()
        image.save(buffer, format='PNG')

        logger.info(
            f"Processed image: {image.width}x{image.height} "
            f"(original: {original_size[0]}x{original_size[1]})"
        )
        return buffer.getvalue()

    def _process_image(self, image: Image.Image) -> Image.Image:
        """
        Apply the full processing pipeline to an image.

        Processing steps:
            1. Fix orientation from EXIF
            2. Resize to the target width
            3. Grayscale
            4. Contrast stretch
            5. Median denoise and unsharp mask
            6. Threshold
        """
        image = ImageOps.exif_transpose(image)
        image = self._resize(image)
        image = self._to_grayscale(image)
        image = ImageOps.autocontrast(image, cutoff=self.autocontrast_cutoff)
        image = image.filter(ImageFilter.MedianFilter(size=self.median_size))
        image = image.filter(ImageFilter.UnsharpMask(
            radius=self.unsharp_radius,
            percent=self.unsharp_percent,
            threshold=self.unsharp_threshold
        ))
        return image.point(lambda x: 255 if x > self.threshold else 0, 'L')

    def target_width(self, width: int) -> int:
        """Target width for a source of the given width."""
        if width >= self.high_resolution_width:
            return self.high_resolution_target
        return self.default_target

    def _resize(self, image: Image.Image) -> Image.Image:
        """Resize to the target width, keeping the aspect ratio."""
        width, height = image.size
        new_width = self.target_width(width)
        if width == new_width:
            return image

        new_height = max(1, round(height * new_width / width))
        logger.debug(f"Resized image from {width}x{height} to {new_width}x{new_height}")
        return image.resize((new_width, new_height), Image.LANCZOS)

    @staticmethod
    def _to_grayscale(image: Image.Image) -> Image.Image:
        """Convert to 8-bit grayscale, flattening transparency on white."""
        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            image = image.convert('RGBA')
            background = Image.new('RGBA', image.size, (255, 255, 255, 255))
            image = Image.alpha_composite(background, image)
        return image.convert('L')
