"""
tabsplit - Shared bill splitter

python3 main.py                          # Interactive CLI mode
python3 main.py receipt.jpg              # Scan image and start CLI
python3 main.py receipt.jpg --quick      # Quick mode - just show the scanned bill
python3 main.py --help                   # Show help
"""

import sys
import argparse

from allocation_engine import summary_to_dataframe
from cli_interface import TabsplitCLI
from config import DEFAULT_MAX_WORKERS, OCR_BACKEND, WORKERS_MAX, WORKERS_MIN
from errors import ExternalServiceError
from gateway import GatewayClient, ServiceGateway
from ingestion import normalize_scan
from ocr_processor import TesseractScanner, create_scanner
from session import SplitSession
from utils import encode_image, format_currency, image_mime_type, validate_image_path


def quick_process(image_path: str, backend: str, workers: int):
    """Quick processing mode - scan and show the bill"""
    print(f"🚀 Quick processing: {image_path}")

    scanner = create_scanner(backend, num_workers=workers)
    receipt = normalize_scan(scanner.scan(encode_image(image_path), image_mime_type(image_path)))
    if isinstance(scanner, TesseractScanner):
        metrics = scanner.processor.metrics
        print(f"⚡ OCR: {metrics.regions_processed} regions on {metrics.workers_used} workers "
              f"in {metrics.processing_time:.2f}s, {metrics.items_detected} items detected")

    if not receipt.items:
        print("\n⚠ No items found in receipt")
        print("Try a better lit photo, or enter the items in interactive mode")
        return

    print(f"\n📋 Found {len(receipt.items)} items:")
    for i, item in enumerate(receipt.items, 1):
        print(f"  {i:2}. {item.name[:40]:40} {format_currency(item.price, receipt.currency):>10}")
    print(f"\n  Tax: {format_currency(receipt.tax, receipt.currency)}"
          f"  Tip: {format_currency(receipt.tip, receipt.currency)}")
    print(f"💰 Total: {format_currency(receipt.total, receipt.currency)}")
    print()
    print(summary_to_dataframe(SplitSession(receipt=receipt).summary()).round(2).to_string(index=False))


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='tabsplit - Shared bill splitter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                       # Interactive mode
  python main.py receipt.jpg           # Scan image then interactive
  python main.py receipt.jpg --quick   # Quick mode - show results only
  python main.py --backend gemini      # Use Gemini for receipt analysis
        """
    )
    parser.add_argument('image', nargs='?', help='Receipt image to process')
    parser.add_argument(
        '--workers',
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f'Number of parallel OCR workers (default: {DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument(
        '--backend',
        choices=['tesseract', 'gemini'],
        default=OCR_BACKEND,
        help=f'Receipt OCR backend (default: {OCR_BACKEND})'
    )
    parser.add_argument('--quick', action='store_true', help='Scan image and show results only')
    parser.add_argument('--version', action='version', version='tabsplit 1.0')

    args = parser.parse_args()

    if not WORKERS_MIN <= args.workers <= WORKERS_MAX:
        print(f"⚠ Workers must be between {WORKERS_MIN} and {WORKERS_MAX}")
        args.workers = max(WORKERS_MIN, min(WORKERS_MAX, args.workers))

    if args.image and not validate_image_path(args.image):
        sys.exit(1)

    if args.quick and args.image:
        try:
            quick_process(args.image, args.backend, args.workers)
        except ExternalServiceError as e:
            print(f"❌ {e}")
            sys.exit(1)
        return

    gateway = ServiceGateway(scanner=create_scanner(args.backend, num_workers=args.workers))
    cli = TabsplitCLI(SplitSession(service=GatewayClient(gateway)))

    if args.image:
        cli.process_receipt(args.image)

    cli.run()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!")
        sys.exit(0)
