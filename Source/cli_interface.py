"""
CLI Interface module for tabsplit
Command-line front end for scanning, assigning and splitting a bill
"""

from datetime import datetime

from allocation_engine import summary_to_dataframe
from config import DEFAULT_TIP_PERCENT
from constants import UNASSIGNED
from data_models import AssignmentUpdate
from errors import ExternalServiceError, SessionBusyError
from merge_resolver import MergeChoice
from session import SplitSession
from tip_calculator import TipPolicy
from utils import (
    clean_text_for_display,
    encode_image,
    format_currency,
    image_mime_type,
    try_parse_int,
    validate_image_path,
    validate_menu_choice,
)


class TabsplitCLI:
    """Command-line interface for tabsplit"""

    def __init__(self, session: SplitSession):
        self.session = session
        self._shown_messages = 0

    def display_banner(self):
        print("\n" + "="*60)
        print("🧾  TABSPLIT - Shared Bill Splitter")
        print("="*60)

    def flush_messages(self):
        """Print chat messages added since the last call"""
        for message in self.session.messages[self._shown_messages:]:
            prefix = {'user': '🙋', 'assistant': '🤖', 'system': 'ℹ'}.get(message.role, '•')
            print(f"{prefix} {message.text}")
        self._shown_messages = len(self.session.messages)

    def process_receipt(self, image_path: str):
        """Scan a receipt image, asking how to combine it with the current bill"""
        print(f"\n📸 Processing receipt: {image_path}")
        try:
            self.session.scan_image(encode_image(image_path), image_mime_type(image_path), image_ref=image_path)
        except (SessionBusyError, ExternalServiceError) as e:
            print(f"⚠ {e}")
            return
        self.flush_messages()

        if self.session.pending is not None:
            self.ask_merge()
        self.display_receipt()

    def ask_merge(self):
        print("\n1. Merge into current bill")
        print("2. Replace current bill")
        print("3. Cancel")
        choice = validate_menu_choice(input("Choice: "), ['1', '2', '3']) or '3'
        option = {'1': MergeChoice.MERGE, '2': MergeChoice.REPLACE, '3': MergeChoice.CANCEL}[choice]
        self.session.resolve_merge(option)
        self.flush_messages()

    def display_receipt(self):
        """Display the current receipt"""
        receipt = self.session.receipt
        if not receipt.items:
            print("\n⚠ No items on the bill yet")
            return

        print("\n" + "="*60)
        print("📋 RECEIPT ITEMS")
        print("="*60)

        for i, item in enumerate(receipt.items, 1):
            assigned = ', '.join(item.assigned_to) if item.assigned_to else UNASSIGNED
            name = clean_text_for_display(item.name, 28)
            print(f"{i:2}. {name:28} {item.quantity:4g}x {item.unit_price:7.2f} = {item.price:8.2f} [{assigned}]")

        print("-"*60)
        print(f"{'SUBTOTAL:':45} {format_currency(receipt.subtotal, receipt.currency):>12}")
        print(f"{'TAX:':45} {format_currency(receipt.tax, receipt.currency):>12}")
        print(f"{'TIP:':45} {format_currency(receipt.tip, receipt.currency):>12}")
        print(f"{'TOTAL:':45} {format_currency(receipt.total, receipt.currency):>12}")

    def _pick_item(self):
        receipt = self.session.receipt
        if not receipt.items:
            print("\n⚠ No receipt items")
            return None
        self.display_receipt()
        idx = try_parse_int(input("Item number: ") or "")
        if idx is None or not 1 <= idx <= len(receipt.items):
            print("Invalid selection")
            return None
        return receipt.items[idx - 1]

    def add_item(self):
        name = input("Name: ")
        price = input("Line price: ")
        quantity = input("Quantity [1]: ").strip() or "1"
        if self.session.add_item(name, price, quantity):
            print(f"✓ Added {name.strip()}")
        else:
            print("Invalid item")

    def edit_item(self):
        item = self._pick_item()
        if item is None:
            return
        name = input(f"Name [{item.name}]: ").strip() or item.name
        price = input(f"Line price [{item.price:.2f}]: ").strip() or str(item.price)
        quantity = input(f"Quantity [{item.quantity:g}]: ").strip() or str(item.quantity)
        if self.session.edit_item(item.id, name, price, quantity):
            print(f"✓ Updated {name}")
        else:
            print("Invalid item")

    def delete_item(self):
        item = self._pick_item()
        if item is not None and self.session.delete_item(item.id):
            print(f"✓ Removed {item.name}")

    def manage_people(self):
        """Manage the people roster used for manual assignment"""
        people = self.session.people
        while True:
            print(f"\nCurrent people: {', '.join(people) if people else 'None'}")
            print("1. Add person")
            print("2. Remove person")
            print("3. Done")
            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3']) or ''

            if choice == '1':
                name = input("Enter name: ").strip()
                if name and name not in people and name != UNASSIGNED:
                    people.append(name)
                    print(f"✓ Added {name}")
            elif choice == '2' and people:
                for i, person in enumerate(people, 1):
                    print(f"{i}. {person}")
                idx = try_parse_int(input("Select person number to remove: ") or "")
                if idx is not None and 1 <= idx <= len(people):
                    print(f"✓ Removed {people.pop(idx - 1)}")
                else:
                    print("Invalid selection")
            elif choice == '3':
                break

    def assign_items(self):
        """Assign each item to people by number"""
        receipt = self.session.receipt
        people = self.session.people
        if not receipt.items or not people:
            print("\n⚠ Need receipt items and people to assign")
            return

        updates = []
        for item in receipt.items:
            print(f"\n{item.name} - {format_currency(item.price, receipt.currency)}")
            print(f"Assigned to: {', '.join(item.assigned_to) if item.assigned_to else 'None'}")
            print("1. Everyone   2. Specific people   3. Nobody   4. Skip")
            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3', '4']) or '4'

            if choice == '1':
                updates.append(AssignmentUpdate(item.id, list(people)))
            elif choice == '2':
                for i, person in enumerate(people, 1):
                    print(f"{i}. {person}")
                picks = [try_parse_int(x) for x in input("Person numbers (comma-separated): ").split(',')]
                names = [people[i - 1] for i in picks if i is not None and 1 <= i <= len(people)]
                if names:
                    updates.append(AssignmentUpdate(item.id, names))
                else:
                    print("Invalid selection")
            elif choice == '3':
                updates.append(AssignmentUpdate(item.id, []))

        self.session.assign(updates)

    def chat(self):
        """Assign items with free-text commands until an empty line"""
        print("\nDescribe who had what (empty line to stop).")
        while True:
            text = input("> ").strip()
            if not text:
                break
            try:
                self.session.send_command(text)
            except (SessionBusyError, ExternalServiceError) as e:
                print(f"⚠ {e}")
            self.flush_messages()

    def set_tip(self):
        """Choose how the tip is computed"""
        print("\n1. Keep tip from receipt")
        print("2. Percent of subtotal")
        print("3. Fixed amount")
        choice = validate_menu_choice(input("Choice: "), ['1', '2', '3']) or '1'

        if choice == '1':
            self.session.set_tip(TipPolicy.RECEIPT)
        else:
            if choice == '2':
                policy = TipPolicy.PERCENT
                value = input(f"Percent [{DEFAULT_TIP_PERCENT:g}]: ").strip() or DEFAULT_TIP_PERCENT
            else:
                policy = TipPolicy.FIXED
                value = input("Amount: ")
            if not self.session.set_tip(policy, value):
                print("Invalid amount")
                return
        receipt = self.session.receipt
        print(f"✓ Tip: {format_currency(receipt.tip, receipt.currency)}  "
              f"New total: {format_currency(receipt.total, receipt.currency)}")

    def display_summary(self):
        """Show what each person owes"""
        summaries = self.session.summary()
        if not summaries:
            print("\n⚠ Nothing to split yet")
            return

        print("\n" + "="*60)
        print("💰 WHO OWES WHAT")
        print("="*60)
        table = summary_to_dataframe(summaries).round(2)
        print(table.to_string(index=False))
        if not self.session.all_assigned():
            print(f"\n⚠ Some items are still {UNASSIGNED.lower()}")

    def export_results(self):
        """Export receipt and summary to JSON and CSV"""
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        json_path = f"tabsplit_{stamp}.json"
        csv_path = f"tabsplit_{stamp}.csv"
        try:
            self.session.export_json(json_path)
            summary_to_dataframe(self.session.summary()).round(2).to_csv(csv_path, index=False)
        except OSError as e:
            print(f"\nExport failed: {e}")
            return
        print(f"\n✅ Exported to {json_path} and {csv_path}")

    def run(self):
        """Run the CLI application"""
        self.display_banner()
        self.flush_messages()

        actions = {
            '1': self.prompt_image,
            '2': self.display_receipt,
            '3': self.add_item,
            '4': self.edit_item,
            '5': self.delete_item,
            '6': self.chat,
            '7': self.manage_people,
            '8': self.assign_items,
            '9': self.set_tip,
            '10': self.display_summary,
            '11': self.export_results,
        }

        while True:
            print("\n" + "="*50)
            print("MAIN MENU")
            print("="*50)
            print("1. Scan receipt image")
            print("2. Show receipt")
            print("3. Add item")
            print("4. Edit item")
            print("5. Delete item")
            print("6. Assign with a command")
            print("7. Manage people")
            print("8. Assign items manually")
            print("9. Set tip")
            print("10. Show summary")
            print("11. Export results")
            print("12. Exit")

            choice = input("\nChoice: ").strip()
            if choice == '12':
                print("\n👋 Thanks for using tabsplit!")
                break
            action = actions.get(choice)
            if action:
                action()

    def prompt_image(self):
        image_path = input("Enter image path: ").strip()
        if validate_image_path(image_path):
            self.process_receipt(image_path)
        else:
            print("⚠ Invalid or unsupported image")
