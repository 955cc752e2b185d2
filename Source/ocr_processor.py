"""
OCR Processing module for tabsplit
Local Tesseract backend: parallel OCR of receipt images into the raw receipt payload
"""

import io
import time
import base64
import binascii
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Tuple

import cv2
import numpy as np
import pytesseract
from PIL import Image, ImageEnhance, ImageFilter, UnidentifiedImageError

from config import (
    DEBUG,
    DEFAULT_MAX_WORKERS,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    IMAGE_REGION_OVERLAP_PX,
    OCR_BACKEND,
    OCR_LANGUAGES,
    OCR_PSM,
)
from data_models import ProcessingMetrics
from errors import ExternalServiceError
from receipt_parser import ReceiptParser
from utils import strip_data_url


class ReceiptScanner(ABC):
    """Turns an image payload into a raw receipt payload"""

    @abstractmethod
    def scan(self, image_base64: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
        """Return {items: [{name, price, quantity}], subtotal, tax, tip, total, currency}"""
        ...


def decode_image(image_base64: str) -> Image.Image:
    """Decode a base64 (or data URL) payload into a PIL image"""
    try:
        raw = base64.b64decode(strip_data_url(image_base64), validate=True)
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (binascii.Error, ValueError, UnidentifiedImageError) as e:
        raise ExternalServiceError(f"image payload could not be decoded: {e}", status=400) from e
    return image


class ParallelOCRProcessor:
    """Parallel OCR processing of receipt images"""

    def __init__(self, num_workers: int = DEFAULT_MAX_WORKERS, debug: bool = DEBUG):
        self.num_workers = num_workers
        self.debug = debug
        self.metrics = ProcessingMetrics()
        self.available_languages = self._check_languages()

    def _check_languages(self) -> List[str]:
        """Available Tesseract languages"""
        try:
            languages = pytesseract.get_languages(config='')
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            if self.debug:
                print(f"⚠ Could not check languages: {e}")
            return ['eng']
        if self.debug:
            print(f"✓ Available OCR languages: {', '.join(languages)}")
        return languages

    def _get_ocr_language(self) -> str:
        """Configured languages that Tesseract actually has, falling back to English"""
        wanted = [lang for lang in OCR_LANGUAGES.split('+') if lang in self.available_languages]
        return '+'.join(wanted) if wanted else 'eng'

    def preprocess_image(self, image: Image.Image) -> Image.Image:
        """Preprocess image to improve OCR accuracy"""
        if image.mode != 'L':
            image = image.convert('L')

        image = ImageEnhance.Contrast(image).enhance(2.0)
        image = image.filter(ImageFilter.SHARPEN)

        # Remove noise with bilateral filter
        img_array = np.array(image)
        img_array = cv2.bilateralFilter(img_array, 9, 75, 75)
        return Image.fromarray(img_array)

    def split_image_into_regions(self, image: Image.Image) -> List[Tuple[int, Image.Image]]:
        """Split image into overlapping horizontal bands"""
        width, height = image.size
        region_height = height // self.num_workers
        regions = []

        for i in range(self.num_workers):
            y_start = i * region_height
            y_end = height if i == self.num_workers - 1 else (i + 1) * region_height + IMAGE_REGION_OVERLAP_PX
            regions.append((i, image.crop((0, y_start, width, min(y_end, height)))))

        return regions

    def process_region(self, region_data: Tuple[int, Image.Image]) -> str:
        """OCR a single region"""
        region_id, region_image = region_data
        if self.debug:
            print(f"  Worker {region_id + 1}: Processing region...")

        text = pytesseract.image_to_string(
            region_image,
            lang=self._get_ocr_language(),
            config=f'--psm {OCR_PSM}'
        )
        if self.debug:
            print(f"  Worker {region_id + 1}: Complete ✓")
        return text

    def process_image_parallel(self, image: Image.Image) -> str:
        """OCR an image with parallel workers, returning text in top-to-bottom order"""
        start_time = time.time()
        if self.debug:
            print(f"\n🚀 Starting parallel OCR with {self.num_workers} workers...")
            print(f"📷 Image loaded: {image.size[0]}x{image.size[1]} pixels")

        regions = self.split_image_into_regions(self.preprocess_image(image))
        self.metrics.regions_processed = len(regions)

        full_text = []
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            future_to_region = {
                executor.submit(self.process_region, region): region[0]
                for region in regions
            }
            for future in as_completed(future_to_region):
                region_id = future_to_region[future]
                try:
                    full_text.append((region_id, future.result()))
                except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
                    raise ExternalServiceError(f"OCR failed on region {region_id + 1}: {e}") from e

        full_text.sort(key=lambda x: x[0])
        combined_text = '\n'.join(text for _, text in full_text)

        self.metrics.workers_used = self.num_workers
        self.metrics.processing_time = time.time() - start_time

        if self.debug:
            print(f"✅ OCR complete in {self.metrics.processing_time:.2f}s")
        return combined_text


class TesseractScanner(ReceiptScanner):
    """Local scanner: Tesseract OCR followed by regex parsing"""

    def __init__(self, num_workers: int = DEFAULT_MAX_WORKERS, debug: bool = DEBUG):
        self.processor = ParallelOCRProcessor(num_workers=num_workers, debug=debug)
        self.parser = ReceiptParser(debug=debug)

    def scan(self, image_base64: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
        image = decode_image(image_base64)
        try:
            ocr_text = self.processor.process_image_parallel(image)
            payload = self.parser.parse(ocr_text)
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError(f"local OCR failed: {e}") from e
        self.processor.metrics.items_detected = len(payload['items'])
        return payload


def create_scanner(backend: str = OCR_BACKEND, num_workers: int = DEFAULT_MAX_WORKERS) -> ReceiptScanner:
    """Create a receipt scanner for the configured backend"""
    if backend == "tesseract":
        return TesseractScanner(num_workers=num_workers)
    if backend == "gemini":
        from gemini_client import GeminiClient, GeminiScanner

        return GeminiScanner(GeminiClient(api_key=GEMINI_API_KEY, model=GEMINI_MODEL))
    raise ValueError(f"Unknown OCR backend: {backend!r} (choose tesseract or gemini)")
