"""
Unit tests for image pre-processing and the OCR engine.

Tesseract itself is mocked except in the tests marked ``ocr``
(run with --run-ocr).
"""

import io

import pytest
from PIL import Image, ImageDraw

from src.extraction.extraction_result import RawDocument
from src.input_handler.image_processor import ImageProcessor
from src.ocr_engine import engine as engine_module
from src.ocr_engine import tesseract_backend
from src.ocr_engine.engine import OCREngine
from src.ocr_engine.tesseract_backend import TesseractBackend
from src.utils.exceptions import (
    CorruptedFileError,
    OCREngineNotAvailableError,
    OCRProcessingError,
)


def make_image(width, height, mode="RGB", fmt="PNG"):
    """Encoded white page with a dark text-like band."""
    image = Image.new(mode, (width, height), "white")
    draw = ImageDraw.Draw(image)
    draw.rectangle([width // 10, height // 3, width // 2, height // 2], fill="black")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def no_tesseract_check(monkeypatch):
    """Construct Tesseract backends without the binary."""
    monkeypatch.setattr(TesseractBackend, "_check_dependencies", lambda self: None)


class TestImageProcessor:
    """Tests for ImageProcessor"""

    @pytest.fixture
    def processor(self):
        return ImageProcessor()

    def test_high_resolution_scaled_down(self, processor):
        output = Image.open(io.BytesIO(processor.preprocess(make_image(2400, 1200))))
        assert output.size == (1240, 620)

    def test_low_resolution_scaled_up(self, processor):
        output = Image.open(io.BytesIO(processor.preprocess(make_image(600, 300))))
        assert output.size == (1748, 874)

    def test_target_width_threshold(self, processor):
        assert processor.target_width(2000) == 1240
        assert processor.target_width(1999) == 1748

    def test_output_is_binarized_png(self, processor):
        data = processor.preprocess(make_image(800, 400, fmt="JPEG"))
        output = Image.open(io.BytesIO(data))
        assert output.format == "PNG"
        assert output.mode == "L"
        assert set(output.getdata()) <= {0, 255}

    def test_transparency_flattened_on_white(self, processor):
        output = Image.open(io.BytesIO(processor.preprocess(make_image(600, 300, mode="RGBA"))))
        assert output.mode == "L"
        assert output.getpixel((0, 0)) == 255

    def test_unreadable_bytes(self, processor):
        with pytest.raises(CorruptedFileError):
            processor.preprocess(b"not an image")


class TestTesseractBackend:
    """Tests for TesseractBackend with pytesseract mocked"""

    def test_mean_confidence_ignores_non_words(self):
        data = {"text": ["", "Total", "TTC", " ", "1800,00"], "conf": [-1, 90, 80, -1, "95.5"]}
        assert TesseractBackend._mean_confidence(data) == 88.5

    def test_mean_confidence_without_words(self):
        assert TesseractBackend._mean_confidence({"text": ["", " "], "conf": [-1, -1]}) == 0.0

    def test_config_preserves_spaces(self, no_tesseract_check):
        config = TesseractBackend()._build_config()
        assert "--psm 6" in config
        assert "preserve_interword_spaces=1" in config

    def test_missing_binary(self, monkeypatch):
        def not_found():
            raise tesseract_backend.pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(tesseract_backend.pytesseract, "get_tesseract_version", not_found)
        with pytest.raises(OCREngineNotAvailableError):
            TesseractBackend()

    def test_recognize(self, no_tesseract_check, monkeypatch):
        monkeypatch.setattr(
            tesseract_backend.pytesseract, "image_to_string",
            lambda image, lang, config: "Total TTC :  1 800,00 €\n"
        )
        monkeypatch.setattr(
            tesseract_backend.pytesseract, "image_to_data",
            lambda image, lang, config, output_type: {
                "text": ["Total", "TTC", ":", "1", "800,00", "€"],
                "conf": [96, 94, 90, 88, 92, 80],
            }
        )
        document = TesseractBackend().recognize(make_image(100, 50))
        assert document == RawDocument(text="Total TTC :  1 800,00 €\n", confidence=90.0)

    def test_tesseract_failure(self, no_tesseract_check, monkeypatch):
        def failing(*args, **kwargs):
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(tesseract_backend.pytesseract, "image_to_string", failing)
        with pytest.raises(OCRProcessingError):
            TesseractBackend().recognize(make_image(100, 50))

    def test_unreadable_image(self, no_tesseract_check):
        with pytest.raises(OCRProcessingError):
            TesseractBackend().recognize(b"garbage")


class TestOCREngine:
    """Tests for OCREngine"""

    def test_unknown_backend(self):
        with pytest.raises(OCREngineNotAvailableError):
            OCREngine("easyocr")

    def test_backend_alias(self, no_tesseract_check):
        assert OCREngine("pytesseract").backend_name == "tesseract"

    def test_backend_from_config(self, no_tesseract_check, monkeypatch):
        monkeypatch.setattr(engine_module, "get_config", lambda key, default=None: "tesseract")
        assert isinstance(OCREngine().backend, TesseractBackend)

    def test_empty_buffer(self, no_tesseract_check):
        with pytest.raises(OCRProcessingError):
            OCREngine().recognize(b"")

    @pytest.mark.ocr
    def test_real_recognition(self):
        image = Image.new("L", (1200, 200), 255)
        ImageDraw.Draw(image).text((40, 80), "Total TTC 1800,00", fill=0)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        document = OCREngine().recognize(ImageProcessor().preprocess(buffer.getvalue()))
        assert 0.0 <= document.confidence <= 100.0
        assert isinstance(document.text, str)
