#!/usr/bin/env python3
"""
Catalog API seeder -- populate demo accounts and products.

Usage:
  python seed.py                 # users and items
  python seed.py --users         # demo accounts only
  python seed.py --items         # demo products only (owned by "admin")
  python seed.py --reset         # wipe the chosen collections first

Environment variables:
  DATABASE_URL   Target database (default sqlite:///./catalog.db)
  SECRET_KEY     Required unless DEBUG=true (see core/config.py)

Demo accounts (change these passwords anywhere but a laptop):
  admin / admin123       role admin
  manager / manager123   role user
  user / user123         role user
"""

import argparse
import sys

from auth.credentials import hash_password
from auth.models import ROLE_ADMIN, ROLE_USER, User
from auth.store import UserStore
from catalog.store import ItemStore
from catalog.validation import validate_new_item
from core.config import get_settings

DEMO_USERS: list[tuple[str, str, str]] = [
    ("admin", "admin123", ROLE_ADMIN),
    ("manager", "manager123", ROLE_USER),
    ("user", "user123", ROLE_USER),
]

DEMO_PRODUCTS: list[dict] = [
    {"name": "iPhone 13", "price": 500, "category": "smartphone", "brand": "Apple"},
    {"name": "iPhone 14", "price": 650, "category": "smartphone", "brand": "Apple"},
    {"name": "iPhone 15", "price": 850, "category": "smartphone", "brand": "Apple"},
    {"name": "Samsung Galaxy S22", "price": 480, "category": "smartphone", "brand": "Samsung"},
    {"name": "Samsung Galaxy S23", "price": 620, "category": "smartphone", "brand": "Samsung"},
    {"name": "Xiaomi Mi 12", "price": 430, "category": "smartphone", "brand": "Xiaomi"},
    {"name": "Xiaomi Mi 13", "price": 510, "category": "smartphone", "brand": "Xiaomi"},
    {"name": "MacBook Air M1", "price": 900, "category": "laptop", "brand": "Apple"},
    {"name": "MacBook Air M2", "price": 1200, "category": "laptop", "brand": "Apple"},
    {"name": "Dell XPS 13", "price": 1100, "category": "laptop", "brand": "Dell"},
    {"name": "HP Spectre x360", "price": 1050, "category": "laptop", "brand": "HP"},
    {"name": "iPad Pro 11", "price": 780, "category": "tablet", "brand": "Apple"},
    {"name": "iPad Air", "price": 600, "category": "tablet", "brand": "Apple"},
    {"name": "Samsung Galaxy Tab S8", "price": 670, "category": "tablet", "brand": "Samsung"},
    {"name": "Apple Watch Series 8", "price": 420, "category": "watch", "brand": "Apple"},
    {"name": "Apple Watch Ultra", "price": 750, "category": "watch", "brand": "Apple"},
    {"name": "AirPods Pro", "price": 250, "category": "audio", "brand": "Apple"},
    {"name": "Sony WH-1000XM5", "price": 330, "category": "audio", "brand": "Sony"},
    {"name": "JBL Charge 5", "price": 180, "category": "audio", "brand": "JBL"},
    {"name": "Logitech MX Master 3", "price": 120, "category": "accessory", "brand": "Logitech"},
]


def seed_users(store: UserStore, reset: bool) -> int:
    """Create the demo accounts that do not exist yet. Returns how many were added."""
    if reset:
        store.delete_all()
    created = 0
    for username, password, role in DEMO_USERS:
        if store.get_by_username(username) is not None:
            print(f"  {username} already exists, skipping")
            continue
        store.create_user(User(username=username, hashed_password=hash_password(password), role=role))
        print(f"  {username} / {password} ({role})")
        created += 1
    return created


def seed_items(items: ItemStore, users: UserStore, reset: bool) -> int:
    """Insert the demo products with SKU-1000.. and the admin as owner."""
    if reset:
        items.delete_all()
    admin = users.get_by_username("admin")
    owner_id = admin.id if admin is not None else None
    for index, product in enumerate(DEMO_PRODUCTS):
        values = validate_new_item({**product, "sku": f"SKU-{1000 + index}", "inStock": True})
        items.create_item(values, owner_id=owner_id)
    return len(DEMO_PRODUCTS)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="catalog-seed",
        description="Populate the catalog database with demo accounts and products.",
    )
    parser.add_argument("--users", action="store_true", help="Seed demo accounts")
    parser.add_argument("--items", action="store_true", help="Seed demo products")
    parser.add_argument("--reset", action="store_true", help="Delete existing rows before seeding")
    args = parser.parse_args()

    do_users = args.users or not args.items
    do_items = args.items or not args.users

    settings = get_settings()
    users = UserStore(settings.database_url)
    items = ItemStore(settings.database_url)
    try:
        if do_users:
            print("Seeding users...")
            print(f"Users added: {seed_users(users, args.reset)}")
        if do_items:
            print("Seeding items...")
            print(f"Items added: {seed_items(items, users, args.reset)}")
            print(f"Items in catalog: {items.count()}")
    finally:
        items.close()
        users.close()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(130)
