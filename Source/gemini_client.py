"""
Gemini backend for tabsplit
Receipt analysis from an image and assignment commands from free text
"""

import json
import base64
import binascii
from typing import Any, Dict, List

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from config import GEMINI_MODEL, REPLY_LANGUAGE
from errors import ExternalServiceError, QuotaExceededError
from ocr_processor import ReceiptScanner
from utils import strip_data_url

_RECEIPT_PROMPT = """\
Analyze this receipt image. Extract all items, prices, tax, tip and total,
and identify the currency symbol.

Return ONLY a JSON object of this exact shape:
{
  "items": [{"name": "Item", "price": 5.99, "quantity": 1}],
  "subtotal": 0, "tax": 0, "tip": 0, "total": 0, "currency": "$"
}

Rules:
1. "price" is the total price of the line (unit price * quantity).
2. This may be the second half of a long receipt. Do not skip a first item
   that is cut off at the top edge; name it "Item continued".
3. If a name is unreadable but the price is visible, use "Unknown Item".
4. If tax is listed but item prices already include it, still report the tax.
"""

_COMMAND_PROMPT = """\
Current receipt items:
{items}

User command: "{command}"

Instructions:
1. Update the "assignedTo" list of items according to the command.
2. Match item names loosely (e.g. "coke" matches "Coca Cola").
3. If several people share an item, list all of their names.
4. Keep existing assignments unless the command changes them or says to remove someone.
5. Return every item with its id and its NEW "assignedTo" list.
6. Write a short confirmation message in {language}.

Return ONLY a JSON object of this exact shape:
{{
  "items": [{{"id": "item id", "assignedTo": ["Name"]}}],
  "people_found": ["Name"],
  "response_message": "text"
}}
"""


def _parse_json(text: str) -> Any:
    """Parse the JSON body of a model response, tolerating markdown fences"""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)

    if not cleaned:
        raise ExternalServiceError("empty response from Gemini")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExternalServiceError(f"Gemini returned invalid JSON: {e}") from e


def _is_quota_error(error: Exception) -> bool:
    text = str(error).lower()
    return "429" in text or "quota" in text or "resource_exhausted" in text or "rate limit" in text


class GeminiClient:
    """Thin wrapper around the Gemini generate_content call"""

    def __init__(self, api_key: str = "", model: str = GEMINI_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    def _generate(self, parts: List[Any]) -> Any:
        if not self._api_key:
            raise ExternalServiceError("Missing API key", status=500)

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        try:
            response = model.generate_content(
                parts,
                generation_config={"response_mime_type": "application/json"},
            )
            text = response.text
        except google_exceptions.ResourceExhausted as e:
            raise QuotaExceededError(str(e)) from e
        except google_exceptions.GoogleAPIError as e:
            if _is_quota_error(e):
                raise QuotaExceededError(str(e)) from e
            raise ExternalServiceError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            # response.text raises ValueError when the candidate was blocked
            raise ExternalServiceError(f"Gemini returned no usable text: {e}") from e
        except Exception as e:
            raise ExternalServiceError(f"Gemini request failed: {e}") from e

        return _parse_json(text)

    def analyze_receipt(self, image_base64: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
        """Extract the raw receipt payload from an image"""
        try:
            data = base64.b64decode(strip_data_url(image_base64), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ExternalServiceError(f"image payload could not be decoded: {e}", status=400) from e
        image_part = {"mime_type": mime_type, "data": data}
        return self._generate([image_part, _RECEIPT_PROMPT])

    def interpret_command(self, items: List[Dict[str, Any]], command: str) -> Dict[str, Any]:
        """Resolve a free-text assignment command against the abbreviated item list"""
        prompt = _COMMAND_PROMPT.format(
            items=json.dumps(items, indent=2, ensure_ascii=False),
            command=command.replace('"', "'"),
            language=REPLY_LANGUAGE,
        )
        return self._generate([prompt])


class GeminiScanner(ReceiptScanner):
    """Scanner that delegates image analysis to Gemini"""

    def __init__(self, client: GeminiClient):
        self.client = client

    def scan(self, image_base64: str, mime_type: str = "image/jpeg") -> Dict[str, Any]:
        return self.client.analyze_receipt(image_base64, mime_type)
