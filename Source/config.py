"""
Centralized configuration for tabsplit with environment
"""

import os

# OCR settings
OCR_BACKEND = os.getenv("TABSPLIT_OCR_BACKEND", "tesseract")
OCR_PSM = int(os.getenv("TABSPLIT_OCR_PSM", "6"))
OCR_LANGUAGES = os.getenv("TABSPLIT_OCR_LANGUAGES", "eng")

# Gemini settings (credential stays server side, see gateway.py)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("TABSPLIT_GEMINI_MODEL", "gemini-2.5-flash")
REPLY_LANGUAGE = os.getenv("TABSPLIT_REPLY_LANGUAGE", "English")

# Runtime settings
DEFAULT_MAX_WORKERS = int(os.getenv("TABSPLIT_MAX_WORKERS", "4"))
CURRENCY_DEFAULT = os.getenv("TABSPLIT_DEFAULT_CURRENCY", "$")
DEBUG = os.getenv("TABSPLIT_DEBUG", "0") == "1"

# Thresholds
UNASSIGNED_EPSILON = float(os.getenv("TABSPLIT_UNASSIGNED_EPSILON", "0.01"))
ZERO_SUBTOTAL_GUARD = float(os.getenv("TABSPLIT_ZERO_SUBTOTAL_GUARD", "1e-9"))
TAX_INCLUDED_TOLERANCE = float(os.getenv("TABSPLIT_TAX_INCLUDED_TOLERANCE", "0.05"))
DEFAULT_TIP_PERCENT = float(os.getenv("TABSPLIT_DEFAULT_TIP_PERCENT", "10"))
DUPLICATE_SIMILARITY_THRESHOLD = float(os.getenv("TABSPLIT_DUP_SIMILARITY", "0.95"))
IMAGE_REGION_OVERLAP_PX = int(os.getenv("TABSPLIT_IMAGE_OVERLAP", "50"))
MAX_IMAGE_SIZE_BYTES = int(os.getenv("TABSPLIT_MAX_IMAGE_SIZE_BYTES", str(50 * 1024 * 1024)))

# Price normalization
ITEM_PRICE_MIN = float(os.getenv("TABSPLIT_ITEM_PRICE_MIN", "0.01"))
ITEM_PRICE_MAX = float(os.getenv("TABSPLIT_ITEM_PRICE_MAX", "10000"))

# Workers bounds
WORKERS_MIN = int(os.getenv("TABSPLIT_WORKERS_MIN", "1"))
WORKERS_MAX = int(os.getenv("TABSPLIT_WORKERS_MAX", "16"))
