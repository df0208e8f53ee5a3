from datetime import datetime
from decimal import Decimal
from enum import Enum

from errors import (
    InsufficientPaymentError,
    InvalidPaymentError,
    OutOfStockError,
    ValidationError,
)
from log import get_logger
from models import MAX_STOCK, CartEntry, SaleLine, parse_money, parse_stock, price_text

logger = get_logger(__name__)


def _clean_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Product name is required")
    return name.strip()


def _clean_image(image):
    # opaque URI, stored verbatim
    return image or None


#Inventory service
class InventoryService:

    def __init__(self, db):
        self.db = db

    def add_product(self, name, price, stock, image=None):
        name = _clean_name(name)
        price = parse_money(price, "price")
        stock = parse_stock(stock)
        return self.db.create_product(name, price, stock, _clean_image(image))

    def edit_product(self, product_id, name, price, stock, image=None):
        """Replace every field of an existing product. Raises NotFoundError if absent."""
        name = _clean_name(name)
        price = parse_money(price, "price")
        stock = parse_stock(stock)
        return self.db.update_product(product_id, name, price, stock, _clean_image(image))

    def delete_product(self, product_id):
        self.db.delete_product(product_id)

    def get_product(self, product_id):
        return self.db.get_product(product_id)

    def list_products(self):
        return self.db.list_products()

    def search(self, query):
        """Products whose name contains `query` (case-insensitive) or whose
        price text contains it, in listing order."""
        products = self.db.list_products()
        query = (query or "").strip()
        if not query:
            return products
        needle = query.lower()
        return [
            p for p in products
            if needle in p.name.lower() or query in price_text(p.price)
        ]

    def decrement_stock(self, product_id, amount=1):
        if isinstance(amount, bool) or not isinstance(amount, int) or not 1 <= amount <= MAX_STOCK:
            raise ValidationError(f"Invalid amount: {amount!r}")
        product = self.db.decrement_stock(product_id, amount)
        logger.info("Stock of product %s reduced by %d to %d", product_id, amount, product.stock)
        return product

    def reset_all(self):
        self.db.delete_all_products()


class CheckoutState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    SETTLING = "settling"


#Cart service
class CartService:
    """In-memory cart. Stock is taken from inventory when an entry is added."""

    def __init__(self, inventory):
        self.inventory = inventory
        self._entries = []
        self.state = CheckoutState.IDLE

    @property
    def entries(self):
        return tuple(self._entries)

    @property
    def size(self):
        return len(self._entries)

    def add_to_cart(self, product):
        if product.stock <= 0:
            raise OutOfStockError(f"{product.name} is out of stock")

        self._entries.append(CartEntry(product.id, product.name, product.price))
        try:
            updated = self.inventory.decrement_stock(product.id, 1)
        except Exception:
            self._entries.pop()
            raise
        self.state = CheckoutState.ACCUMULATING
        return updated

    def get_total(self):
        return sum((e.price for e in self._entries), Decimal("0"))

    def clear(self):
        self._entries = []
        self.state = CheckoutState.IDLE


#Check-out service
class CheckoutService:

    def __init__(self, db, cart):
        self.db = db
        self.cart = cart

    def settle(self, payment):
        """Close the cart against `payment` and record the sale.

        Returns a dict with total, payment, change and the recorded sale.
        On any failure the cart is left as it was.
        """
        payment = parse_money(payment, "payment", error=InvalidPaymentError)
        if not self.cart.size:
            raise ValidationError("Cart is empty")

        total = self.cart.get_total()
        self.cart.state = CheckoutState.SETTLING
        try:
            if payment < total:
                raise InsufficientPaymentError(total, payment)
            lines = [SaleLine(i, e.name, e.price) for i, e in enumerate(self.cart.entries)]
            sale = self.db.create_sale(lines, total, datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        except Exception:
            self.cart.state = CheckoutState.ACCUMULATING
            raise

        self.cart.clear()
        change = payment - total
        logger.info("Sale %s settled: total %s, paid %s, change %s", sale.id, total, payment, change)
        return {
            'total': total,
            'payment': payment,
            'change': change,
            'sale': sale,
        }

    def list_sales(self):
        return self.db.list_sales()

    def reset_sales_history(self):
        self.db.delete_all_sales()


def daily_totals(sales):
    """Aggregate sales into (YYYY-MM-DD, total) pairs, oldest day first."""
    totals = {}
    for sale in sales:
        day = (sale.datetime or "")[:10]
        totals[day] = totals.get(day, Decimal("0")) + sale.total
    return sorted(totals.items())
