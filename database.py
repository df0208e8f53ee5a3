import sqlite3
from contextlib import contextmanager

from errors import InsufficientStockError, NotFoundError, StorageError
from log import get_logger
from models import Product, Sale, SaleLine, money_from_db, stored_money, summarize
from settings import DB_NAME, DB_TIMEOUT

logger = get_logger(__name__)


class DatabaseManager:
    """Durable storage for products and sales.

    Every public method runs as one transaction on a fresh connection: it either
    commits fully or rolls back and raises. sqlite errors surface as StorageError.
    """

    def __init__(self, db_name=DB_NAME, timeout=DB_TIMEOUT):
        self.db_name = db_name
        self.timeout = timeout
        self.check_schema()

    def connect(self):
        conn = sqlite3.connect(self.db_name, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self):
        try:
            conn = self.connect()
        except sqlite3.Error as e:
            logger.error("Could not open database %s: %s", self.db_name, e)
            raise StorageError(f"Could not open database: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Storage operation failed, rolled back", exc_info=True)
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def check_schema(self):
        with self.transaction() as conn:
            c = conn.cursor()

            # Products
            c.execute('''CREATE TABLE IF NOT EXISTS products (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                price REAL NOT NULL,
                stock INTEGER NOT NULL,
                image TEXT
            )''')

            # Sales
            c.execute('''CREATE TABLE IF NOT EXISTS sales (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                products TEXT NOT NULL,
                total REAL NOT NULL,
                datetime TEXT NOT NULL
            )''')

            # Sale line items
            c.execute('''CREATE TABLE IF NOT EXISTS sale_items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                sale_id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                name TEXT NOT NULL,
                price REAL NOT NULL,
                FOREIGN KEY(sale_id) REFERENCES sales(id) ON DELETE CASCADE
            )''')

    # --- PRODUCTS ---
    def create_product(self, name, price, stock, image=None):
        with self.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO products (name, price, stock, image) VALUES (?, ?, ?, ?)",
                (name, float(price), stock, image),
            )
            product_id = cur.lastrowid
        logger.info("Created product %s (%s)", product_id, name)
        return Product(product_id, name, stored_money(price), stock, image)

    def update_product(self, product_id, name, price, stock, image=None):
        with self.transaction() as conn:
            cur = conn.execute(
                "UPDATE products SET name = ?, price = ?, stock = ?, image = ? WHERE id = ?",
                (name, float(price), stock, image, product_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"Product {product_id} not found")
        logger.info("Updated product %s", product_id)
        return Product(product_id, name, stored_money(price), stock, image)

    def delete_product(self, product_id):
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
            deleted = cur.rowcount
        logger.info("Deleted product %s (%d rows)", product_id, deleted)

    def get_product(self, product_id):
        with self.transaction() as conn:
            row = conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Product {product_id} not found")
        return Product.from_row(row)

    def list_products(self):
        with self.transaction() as conn:
            rows = conn.execute("SELECT * FROM products ORDER BY id").fetchall()
        return [Product.from_row(r) for r in rows]

    def count_products(self):
        with self.transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]

    def decrement_stock(self, product_id, amount=1):
        with self.transaction() as conn:
            cur = conn.execute(
                "UPDATE products SET stock = stock - ? WHERE id = ? AND stock >= ?",
                (amount, product_id, amount),
            )
            row = conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Product {product_id} not found")
            if cur.rowcount == 0:
                raise InsufficientStockError(
                    f"Not enough stock for {row['name']}: {row['stock']} left, {amount} requested"
                )
        return Product.from_row(row)

    def delete_all_products(self):
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM products")
            deleted = cur.rowcount
        logger.info("Deleted all products (%d rows)", deleted)

    # --- SALES ---
    def create_sale(self, lines, total, created_at):
        lines = list(lines)
        summary = summarize(lines)
        with self.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO sales (products, total, datetime) VALUES (?, ?, ?)",
                (summary, float(total), created_at),
            )
            sale_id = cur.lastrowid
            conn.executemany(
                "INSERT INTO sale_items (sale_id, position, name, price) VALUES (?, ?, ?, ?)",
                [(sale_id, line.position, line.name, float(line.price)) for line in lines],
            )
        logger.info("Recorded sale %s, total %s, %d items", sale_id, total, len(lines))
        stored = [line._replace(price=stored_money(line.price)) for line in lines]
        return Sale(sale_id, stored, stored_money(total), created_at, summary)

    def list_sales(self):
        with self.transaction() as conn:
            sales = conn.execute("SELECT * FROM sales ORDER BY id DESC").fetchall()
            items = conn.execute("SELECT * FROM sale_items ORDER BY sale_id, position").fetchall()

        lines_by_sale = {}
        for it in items:
            lines_by_sale.setdefault(it["sale_id"], []).append(
                SaleLine(it["position"], it["name"], money_from_db(it["price"]))
            )
        return [
            Sale(s["id"], lines_by_sale.get(s["id"], []), money_from_db(s["total"]), s["datetime"], s["products"])
            for s in sales
        ]

    def delete_all_sales(self):
        with self.transaction() as conn:
            conn.execute("DELETE FROM sale_items")
            cur = conn.execute("DELETE FROM sales")
            deleted = cur.rowcount
        logger.info("Deleted sales history (%d sales)", deleted)
