"""
Fixed names and text patterns used across tabsplit
"""

from decimal import Decimal

UNASSIGNED = "Unassigned"

DECIMAL_QUANTIZE = Decimal("0.01")

SYSTEM_ROLE = "system"
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"

WELCOME_MESSAGE = (
    "Hi! Scan a receipt, then tell me who had what, "
    "e.g. 'Ann and Bo shared the pizza'."
)
QUOTA_MESSAGE = (
    "The assistant is receiving too many requests right now. "
    "Please wait a minute and try again."
)
FAILURE_MESSAGE = "Sorry, something went wrong: {detail}. Please try again."

ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.gif', '.webp'}

PATTERNS = {
    'qty_suffix': r'(.+?)\s*[xX×](\d+)\s*[-\s]*\$?([\d,\.]+)\s*(?:\$|USD|€|EUR|£|GBP)?$',
    'qty_prefix': r'^(\d+)\s+(.+?)\s+\$?([\d,\.]+)\s*(?:\$|USD|€|EUR|£|GBP)?$',
    'qty_unit_total': r'(.+?)\s+(\d+)\s*[xX×]\s*\$?([\d,\.]+)\s+\$?([\d,\.]+)$',
    'simple_item': r'^(.+?)\s*[-–]?\s*\$?([\d,\.]+)\s*(?:\$|USD|€|EUR|£|GBP)?\s*$',
}

TOTAL_SUM_PATTERNS = [
    r'^\s*(?:GRAND\s+TOTAL|TOTAL|AMOUNT\s+DUE|BALANCE\s+DUE)\b[^\n]*?(\d[\d,\.]*)\s*(?:[\$€£]|USD|EUR|GBP)?\s*$',
]
SUBTOTAL_PATTERNS = [
    r'^\s*SUB\s*-?\s*TOTAL\b[^\n]*?(\d[\d,\.]*)\s*(?:[\$€£]|USD|EUR|GBP)?\s*$',
]
TAX_PATTERNS = [
    r'^\s*(?:SALES\s+TAX|TAX|VAT|IVA|GST|HST)\b[^\n]*?(\d[\d,\.]*)\s*(?:[\$€£]|USD|EUR|GBP)?\s*$',
]
TIP_PATTERNS = [
    r'^\s*(?:TIP|GRATUITY|SERVICE(?:\s+CHARGE)?)\b[^\n]*?(\d[\d,\.]*)\s*(?:[\$€£]|USD|EUR|GBP)?\s*$',
]

CURRENCY_INDICATORS = {
    '$': r'\$|USD',
    '€': r'€|EUR',
    '£': r'£|GBP',
}

# Lines containing these words are never line items
SKIP_WORDS = [
    'total', 'subtotal', 'sub total', 'tax', 'vat', 'iva', 'gst', 'hst',
    'tip', 'gratuity', 'service', 'cash', 'change', 'card', 'visa',
    'mastercard', 'amex', 'receipt', 'invoice', 'date', 'time', 'cashier',
    'server', 'table', 'guest', 'thank', 'balance', 'amount due',
]

ANALYZING_MESSAGE = "Analyzing receipt... this can take a moment."
SCAN_FAILED_MESSAGE = "I couldn't read that receipt ({detail}). Please try a clearer photo."
COMMAND_FAILED_MESSAGE = "Sorry, I had trouble understanding that command ({detail})."
RECEIPT_READY_MESSAGE = (
    "Receipt ready! I found {count} items. The total is {total}. "
    "Now tell me who had what."
)
MERGE_PROMPT_MESSAGE = (
    "I found {count} new items. Do you want to add them to the current bill "
    "(merge) or start over with this receipt (replace)?"
)
MERGED_MESSAGE = "I've added {count} items to the existing bill."
