"""
Seed menu items from menu.json into the menu_items table.

Seeding is idempotent: an entry whose alpha or numeric code already exists
is skipped, so the script can be re-run after editing menu.json to add items.

Usage:
    python -m scripts.seed_menu [--menu-file path/to/menu.json] [--database-url URL]

Environment:
    APP_DATABASE_URL: Database connection (default: sqlite:///hotel_billing.db)
"""

import json
import sys
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional
import argparse
import logging

from hotel_billing.config import configure_logging
from hotel_billing.engine.catalog import normalize_code
from hotel_billing.engine.totals import MAX_MONEY
from hotel_billing.storage import DuplicateMenuCode, Storage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("alphaCode", "numericCode", "description", "generalRate", "acRate")


def load_menu_json(menu_file: str) -> List[Dict[str, Any]]:
    """
    Load menu entries from a JSON file (a list of menu item objects).

    Args:
        menu_file: Path to menu.json

    Returns:
        Parsed list of menu entries
    """
    if not os.path.exists(menu_file):
        raise FileNotFoundError(f"Menu file not found: {menu_file}")

    with open(menu_file, 'r', encoding='utf-8') as f:
        menu = json.load(f)

    if not isinstance(menu, list):
        raise ValueError(f"{menu_file} must contain a list of menu items")

    logger.info(f"Loaded menu from {menu_file} with {len(menu)} items")
    return menu


def _parse_rate(value) -> Optional[Decimal]:
    try:
        rate = Decimal(str(value))
    except InvalidOperation:
        return None
    if not rate.is_finite() or rate < 0 or rate > MAX_MONEY:
        return None
    return rate


def seed_menu(storage: Storage, entries: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Insert menu entries whose codes are not yet in storage.

    Args:
        storage: Target storage backend
        entries: Menu entries with alphaCode, numericCode, description, generalRate, acRate

    Returns:
        Stats dict with created, skipped and invalid counts
    """
    stats = {"created": 0, "skipped": 0, "invalid": 0}

    existing = storage.list_menu_items()
    alpha_codes = {r.alpha_code for r in existing}
    numeric_codes = {r.numeric_code for r in existing}

    for entry in entries:
        missing = [k for k in REQUIRED_FIELDS if entry.get(k) in (None, "")]
        if missing:
            logger.warning(f"Skipping entry {entry!r} - missing {', '.join(missing)}")
            stats["invalid"] += 1
            continue

        rates = [_parse_rate(entry["generalRate"]), _parse_rate(entry["acRate"])]
        if None in rates:
            logger.warning(f"Skipping entry {entry!r} - rates must be between 0 and {MAX_MONEY}")
            stats["invalid"] += 1
            continue

        alpha_code = normalize_code(entry["alphaCode"])
        numeric_code = str(entry["numericCode"]).strip()
        if alpha_code in alpha_codes or numeric_code in numeric_codes:
            stats["skipped"] += 1
            continue

        try:
            record = storage.add_menu_item(
                alpha_code=alpha_code,
                numeric_code=numeric_code,
                description=str(entry["description"]).strip(),
                general_rate=rates[0],
                ac_rate=rates[1],
            )
        except DuplicateMenuCode as e:
            logger.warning(f"Skipping {alpha_code}/{numeric_code}: {e}")
            stats["skipped"] += 1
            continue

        alpha_codes.add(record.alpha_code)
        numeric_codes.add(record.numeric_code)
        stats["created"] += 1

    logger.info(
        f"Menu seeding complete: {stats['created']} created, "
        f"{stats['skipped']} skipped, {stats['invalid']} invalid"
    )
    return stats


def get_menu_file_path() -> str:
    """Get the path to menu.json, searching from this script's location."""
    menu_file = Path(__file__).parent.parent / "data" / "menu.json"  # backend/data/menu.json
    if menu_file.exists():
        return str(menu_file)

    if Path("data/menu.json").exists():
        return "data/menu.json"

    if Path("backend/data/menu.json").exists():
        return "backend/data/menu.json"

    raise FileNotFoundError("Could not find data/menu.json")


def main():
    """Command-line interface for menu seeding."""
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Seed menu items from menu.json into the database idempotently"
    )
    parser.add_argument(
        '--menu-file',
        help='Path to menu.json (default: data/menu.json)',
        default=None
    )
    parser.add_argument(
        '--database-url',
        help='Database URL (default: env var APP_DATABASE_URL or sqlite:///hotel_billing.db)',
        default=None
    )

    args = parser.parse_args()

    menu_file = args.menu_file or get_menu_file_path()
    logger.info(f"Using menu file: {menu_file}")

    try:
        entries = load_menu_json(menu_file)
    except Exception as e:
        logger.error(f"Failed to load menu: {e}")
        return 1

    db_url = args.database_url or os.getenv('APP_DATABASE_URL', 'sqlite:///hotel_billing.db')
    logger.info(f"Using database: {db_url}")

    from hotel_billing.storage import SQLAlchemyStorage
    storage = SQLAlchemyStorage(db_url)
    try:
        stats = seed_menu(storage, entries)

        print("\n" + "="*60)
        print("SEED RESULTS")
        print("="*60)
        print(f"Items Created:    {stats['created']}")
        print(f"Items Skipped:    {stats['skipped']}")
        print(f"Items Invalid:    {stats['invalid']}")
        print("="*60 + "\n")

        return 0

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)
        return 1
    finally:
        storage.close()


if __name__ == '__main__':
    sys.exit(main())
