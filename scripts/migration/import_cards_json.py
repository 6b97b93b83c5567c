"""
Import card records from a legacy cards.json collection
Run this script once to move a JSON card collection into the database.

Usage:
    python scripts/migration/import_cards_json.py data/cards.json
"""

import json
import sys

from presscard import create_app
from presscard.card_store import card_store
from presscard.models import CardRecord


def import_cards(app, path):
    """Add every card from the JSON file that the database does not have yet"""
    with app.app_context():
        print(f"Reading cards from {path}...")
        with open(path, encoding='utf-8') as f:
            try:
                cards = json.load(f)
            except json.JSONDecodeError as e:
                print(f"[ERROR] {path} is not valid JSON: {e}")
                return False

        if not isinstance(cards, list):
            print("[ERROR] Expected a JSON list of card records")
            return False

        existing = card_store.existing_ids()
        imported = 0
        skipped = 0

        for data in cards:
            card_id = str(data.get('cardId') or '')
            if not card_id:
                print("  - Skipping record without cardId")
                skipped += 1
                continue
            if card_id in existing:
                print(f"  - Card {card_id} already in database")
                skipped += 1
                continue

            card_store.add(CardRecord.from_dict(dict(data, cardId=card_id)))
            existing.add(card_id)
            imported += 1
            print(f"  - Imported card {card_id} ({data.get('fullName')})")

        print(f"[OK] Imported {imported} cards, skipped {skipped}")
        return True


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    sys.exit(0 if import_cards(create_app(), sys.argv[1]) else 1)
