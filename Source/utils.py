#!/usr/bin/env python3
"""
Utility functions for tabsplit
"""

import re
import base64
import mimetypes
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Optional

from config import MAX_IMAGE_SIZE_BYTES
from constants import ALLOWED_IMAGE_EXTENSIONS, DECIMAL_QUANTIZE


def validate_image_path(image_path: str) -> bool:
    """Image path validation with basic security checks"""
    if not isinstance(image_path, str):
        print("Image path must be a string")
        return False

    path = Path(image_path)

    if '..' in path.parts:
        print(f"Security risk: Invalid path pattern: {image_path}")
        return False

    if not path.exists():
        print(f"File not found: {image_path}")
        return False

    if not path.is_file():
        print(f"Path is not a file: {image_path}")
        return False

    size = path.stat().st_size
    if size > MAX_IMAGE_SIZE_BYTES:
        print(f"File too large: {size} bytes (max: {MAX_IMAGE_SIZE_BYTES})")
        return False

    if path.suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        print(f"Unsupported file extension: {path.suffix}")
        return False

    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type and not mime_type.startswith('image/'):
        print(f"Invalid MIME type: {mime_type}")
        return False

    return True


def image_mime_type(image_path: str) -> str:
    """MIME type for an image file, JPEG when unknown"""
    mime_type, _ = mimetypes.guess_type(image_path)
    return mime_type if mime_type and mime_type.startswith('image/') else 'image/jpeg'


def encode_image(image_path: str) -> str:
    """Read an image file as base64 text"""
    return base64.b64encode(Path(image_path).read_bytes()).decode('ascii')


def strip_data_url(payload: str) -> str:
    """Drop a 'data:image/...;base64,' prefix if present"""
    return re.sub(r'^data:image/[\w.+-]+;base64,', '', payload.strip())


def round_money(amount: float) -> float:
    """Round half-up to cents for display and export"""
    return float(Decimal(str(amount)).quantize(DECIMAL_QUANTIZE, rounding=ROUND_HALF_UP))


def format_currency(amount: float, currency: str = '$') -> str:
    """Format currency amount with its symbol in front"""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return f"{currency}0.00"
    sign = '-' if amount < 0 else ''
    return f"{sign}{currency}{abs(round_money(amount)):.2f}"


def try_parse_int(value: str) -> Optional[int]:
    """Safely parse integer from string"""
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return None


def try_parse_float(value: str) -> Optional[float]:
    """Safely parse float from string"""
    try:
        return float(value.strip().replace(',', '.'))
    except (ValueError, AttributeError):
        return None


def validate_menu_choice(choice: str, valid_choices: list[str]) -> Optional[str]:
    """Validate a menu choice against allowed options"""
    if not isinstance(choice, str):
        return None
    choice = choice.strip()
    return choice if choice in set(valid_choices) else None


def clean_text_for_display(text: str, max_length: int = 100) -> str:
    """Clean text for safe display in the terminal"""
    if not isinstance(text, str):
        return ""

    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text)
    text = ' '.join(text.split())

    if len(text) > max_length:
        text = text[:max_length-3] + "..."

    return text
