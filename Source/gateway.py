"""
Service gateway for tabsplit
Forwards scan and command requests to the external services, holding the credential
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config import GEMINI_API_KEY, GEMINI_MODEL, OCR_BACKEND
from errors import ExternalServiceError, QuotaExceededError
from gemini_client import GeminiClient, GeminiScanner
from ocr_processor import ReceiptScanner, create_scanner


@dataclass
class GatewayResponse:
    """Status code plus either the parsed payload or a diagnostic text"""
    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return self.status == 200


class ServiceGateway:
    """Routes a request carrying an image or a {message, items} pair to the right service"""

    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL,
                 scanner: Optional[ReceiptScanner] = None):
        self.client = GeminiClient(api_key=api_key, model=model)
        if scanner is None:
            scanner = GeminiScanner(self.client) if OCR_BACKEND == "gemini" else create_scanner(OCR_BACKEND)
        self.scanner = scanner

    def forward(self, request: Any, method: str = "POST") -> GatewayResponse:
        """Handle one request and never raise; failures become error statuses"""
        if method.upper() != "POST":
            return GatewayResponse(405, "Method Not Allowed")

        if isinstance(request, (str, bytes)):
            try:
                request = json.loads(request or "{}")
            except json.JSONDecodeError as e:
                return GatewayResponse(400, f"Invalid JSON body: {e}")
        if not isinstance(request, dict):
            return GatewayResponse(400, "Request body must be a JSON object")

        try:
            if request.get('imageBase64'):
                if not isinstance(request['imageBase64'], str):
                    return GatewayResponse(400, "'imageBase64' must be a string")
                payload = self.scanner.scan(request['imageBase64'], request.get('mimeType') or "image/jpeg")
            elif 'message' in request:
                message = request.get('message')
                items = request.get('items', [])
                if not isinstance(message, str) or not message.strip():
                    return GatewayResponse(400, "Missing message")
                if not isinstance(items, list):
                    return GatewayResponse(400, "'items' must be a list")
                payload = self.client.interpret_command(items, message.strip())
            else:
                return GatewayResponse(400, "Missing imageBase64 or message")
        except ExternalServiceError as e:
            return GatewayResponse(e.status, str(e))
        except Exception as e:
            return GatewayResponse(500, str(e))

        return GatewayResponse(200, payload)


class GatewayClient:
    """Caller side of the gateway: turns error statuses back into exceptions"""

    def __init__(self, gateway: ServiceGateway):
        self.gateway = gateway

    def _call(self, request: Dict[str, Any]) -> Any:
        response = self.gateway.forward(request)
        if response.status == 429:
            raise QuotaExceededError(str(response.body))
        if not response.ok:
            raise ExternalServiceError(str(response.body), status=response.status)
        return response.body

    def scan_receipt(self, image_base64: str, mime_type: str = "image/jpeg") -> Any:
        return self._call({'imageBase64': image_base64, 'mimeType': mime_type})

    def interpret_command(self, items: List[Dict[str, Any]], message: str) -> Any:
        return self._call({'message': message, 'items': items})
