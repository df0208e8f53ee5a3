import argparse

from database import DatabaseManager
from services import InventoryService
from settings import DB_NAME

# (name, price, stock)
DEMO_PRODUCTS = [
    ("Soda", "1.50", 24),
    ("Chips", "2.00", 30),
    ("Bottled Water", "1.00", 48),
    ("Chocolate Bar", "1.25", 40),
    ("Instant Noodles", "0.90", 60),
    ("Coffee Can", "2.50", 20),
    ("Sandwich", "3.75", 10),
    ("Chewing Gum", "0.50", 100),
]


def seed(db):
    """Insert the demo products when the inventory is empty. Returns how many were added."""
    if db.count_products():
        print("Inventory is not empty; nothing seeded.")
        return 0

    inventory = InventoryService(db)
    for name, price, stock in DEMO_PRODUCTS:
        inventory.add_product(name, price, stock)

    print(f"Database Seeded ({len(DEMO_PRODUCTS)} products).")
    return len(DEMO_PRODUCTS)


def reset(db):
    InventoryService(db).reset_all()
    db.delete_all_sales()
    print("Products and sales history deleted.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument('--db', default=DB_NAME, help='Path of the sqlite database')
    parser.add_argument('--seed', action='store_true', help='Insert demo products into an empty inventory')
    parser.add_argument('--reset', action='store_true', help='Delete all products and the sales history')
    args = parser.parse_args()

    manager = DatabaseManager(db_name=args.db)
    if args.reset:
        reset(manager)
    if args.seed or not args.reset:
        # Default to seeding when no flags provided
        seed(manager)
