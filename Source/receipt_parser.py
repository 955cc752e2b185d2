"""
Receipt Parser module for tabsplit
Parses OCR text into the raw receipt payload {items, subtotal, tax, tip, total, currency}
"""

import re
import os
from concurrent.futures import ThreadPoolExecutor
from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional

from config import (
    CURRENCY_DEFAULT,
    DEBUG,
    DUPLICATE_SIMILARITY_THRESHOLD,
    ITEM_PRICE_MAX,
    ITEM_PRICE_MIN,
)
from constants import (
    CURRENCY_INDICATORS,
    PATTERNS,
    SKIP_WORDS,
    SUBTOTAL_PATTERNS,
    TAX_PATTERNS,
    TIP_PATTERNS,
    TOTAL_SUM_PATTERNS,
)


class ReceiptParser:
    """Parses OCR text to extract line items and receipt amounts"""

    def __init__(self, debug: bool = DEBUG):
        self.debug = debug

    def _clean_price(self, price_str: str) -> float:
        """Clean and convert price string to float"""
        if not price_str:
            return 0.0

        cleaned = re.sub(r'[^\d,\.]', '', str(price_str))

        # European format (comma as decimal separator)
        if ',' in cleaned and '.' in cleaned:
            if cleaned.rfind(',') > cleaned.rfind('.'):
                cleaned = cleaned.replace('.', '').replace(',', '.')
            else:
                cleaned = cleaned.replace(',', '')
        elif ',' in cleaned and cleaned.count(',') == 1:
            if len(cleaned.split(',')[1]) <= 2:
                cleaned = cleaned.replace(',', '.')

        try:
            price = float(cleaned)
            if ITEM_PRICE_MIN <= price <= ITEM_PRICE_MAX:
                return price
        except (ValueError, TypeError):
            pass

        return 0.0

    def _normalize_text(self, text: str) -> str:
        """Normalize text for comparison"""
        normalized = ' '.join(text.lower().split())
        normalized = re.sub(r'[^\w\s]', ' ', normalized)
        return ' '.join(normalized.split())

    def _is_valid_item_name(self, name: str) -> bool:
        """Check if the name is likely a real line item"""
        if not name or len(name.strip()) < 2:
            return False

        normalized_name = f" {self._normalize_text(name)} "
        for skip_word in SKIP_WORDS:
            if f" {skip_word} " in normalized_name:
                return False

        if not re.search(r'[^\W\d_]', name):
            return False

        if len(re.sub(r'[\d\s\.\,\-]', '', name)) < 2:
            return False

        return True

    def _similarity_score(self, str1: str, str2: str) -> float:
        """Similarity score between two strings (0-1)"""
        return SequenceMatcher(None, str1.lower(), str2.lower()).ratio()

    def _deduplicate_by_line_similarity(self, text: str) -> str:
        """Remove duplicate lines produced by overlapping OCR regions"""
        unique_lines = []
        seen_exact = set()
        seen_similar: List[str] = []

        for line in text.split('\n'):
            line = line.strip()
            if not line:
                continue

            if line in seen_exact:
                if self.debug:
                    print(f"  Skipping exact duplicate: '{line}'")
                continue

            is_similar_duplicate = False
            for seen_line in seen_similar[-10:]:
                similarity = self._similarity_score(line, seen_line)
                if similarity > DUPLICATE_SIMILARITY_THRESHOLD:
                    is_similar_duplicate = True
                    if self.debug:
                        print(f"  Skipping similar duplicate: '{line}' (score: {similarity:.3f})")
                    break

            if not is_similar_duplicate:
                unique_lines.append(line)
                seen_exact.add(line)
                seen_similar.append(line)

        return '\n'.join(unique_lines)

    def _make_item(self, name: str, quantity: float, price: float) -> Optional[Dict[str, Any]]:
        name = name.strip().rstrip('-–').strip()
        if not self._is_valid_item_name(name) or price <= 0:
            return None
        return {'name': name, 'price': price, 'quantity': quantity}

    def _extract_item_from_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Extract a line item using the patterns in order, most specific first"""
        line = line.strip()
        if not line:
            return None

        # Name 2 x 3.50 7.00
        match = re.search(PATTERNS['qty_unit_total'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(2))
            unit_price = self._clean_price(match.group(3))
            total_price = self._clean_price(match.group(4))
            if quantity > 0 and abs(quantity * unit_price - total_price) < 0.5:
                item = self._make_item(match.group(1), quantity, total_price)
                if item:
                    return item

        # Name x2 7.00
        match = re.search(PATTERNS['qty_suffix'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(2))
            item = self._make_item(match.group(1), quantity or 1, self._clean_price(match.group(3)))
            if item:
                return item

        # 2 Name 7.00
        match = re.search(PATTERNS['qty_prefix'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(1))
            item = self._make_item(match.group(2), quantity or 1, self._clean_price(match.group(3)))
            if item:
                return item

        # Name 7.00
        match = re.search(PATTERNS['simple_item'], line, re.IGNORECASE)
        if match:
            return self._make_item(match.group(1), 1, self._clean_price(match.group(2)))

        return None

    def _find_amount(self, text: str, patterns: List[str]) -> float:
        """First positive amount matched by any of the patterns"""
        for pattern in patterns:
            for match in re.finditer(pattern, text, re.IGNORECASE | re.MULTILINE):
                amount = self._clean_price(match.group(1))
                if amount > 0:
                    return amount
        return 0.0

    def _detect_currency(self, text: str) -> str:
        """Currency symbol with the most indicators in the text"""
        counts = {
            symbol: len(re.findall(pattern, text, re.IGNORECASE))
            for symbol, pattern in CURRENCY_INDICATORS.items()
        }
        symbol, count = max(counts.items(), key=lambda kv: kv[1])
        return symbol if count > 0 else CURRENCY_DEFAULT

    def parse(self, ocr_text: str) -> Dict[str, Any]:
        """Parse OCR text into a raw receipt payload"""
        if self.debug:
            print("\n🔍 Starting receipt parsing...")
            print(f"OCR text length: {len(ocr_text)} characters")

        cleaned_text = self._deduplicate_by_line_similarity(ocr_text)
        lines = [l for l in cleaned_text.split('\n') if l.strip()]

        items: List[Dict[str, Any]] = []
        max_workers = max(1, min(8, (os.cpu_count() or 4)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for result in executor.map(self._extract_item_from_line, lines):
                if result:
                    items.append(result)

        payload = {
            'items': items,
            'subtotal': self._find_amount(cleaned_text, SUBTOTAL_PATTERNS),
            'tax': self._find_amount(cleaned_text, TAX_PATTERNS),
            'tip': self._find_amount(cleaned_text, TIP_PATTERNS),
            'total': self._find_amount(cleaned_text, TOTAL_SUM_PATTERNS),
            'currency': self._detect_currency(cleaned_text),
        }

        if self.debug:
            print(f"\n📊 Parsing Results:")
            print(f"  Items found: {len(items)}")
            for item in items:
                print(f"    • {item['name']}: {item['quantity']}x = {item['price']:.2f}")
            print(f"  Subtotal: {payload['subtotal']:.2f}  Tax: {payload['tax']:.2f}  "
                  f"Tip: {payload['tip']:.2f}  Total: {payload['total']:.2f} {payload['currency']}")

        return payload
