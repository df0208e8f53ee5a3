import math
from collections import namedtuple
from decimal import Decimal, InvalidOperation

from errors import ValidationError
from settings import CURRENCY

# largest value a sqlite INTEGER column holds
MAX_STOCK = 2 ** 63 - 1


def parse_money(value, label="price", error=ValidationError):
    """Parse a price or payment amount (number or form text) into a Decimal.

    Rejects empty text, NaN/infinity, negative amounts and amounts too large
    to be stored as a REAL by raising `error`.
    """
    if isinstance(value, bool):
        raise error(f"Invalid {label}: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = "" if value is None else str(value).strip()
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise error(f"Invalid {label}: {value!r}") from None
    if not amount.is_finite() or amount < 0 or not math.isfinite(float(amount)):
        raise error(f"Invalid {label}: {value!r}")
    return amount


def parse_stock(value):
    if isinstance(value, bool):
        raise ValidationError(f"Invalid stock: {value!r}")
    if isinstance(value, int):
        stock = value
    elif isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or int(value) != value:
            raise ValidationError(f"Invalid stock: {value!r}")
        stock = int(value)
    else:
        text = "" if value is None else str(value).strip()
        try:
            stock = int(text)
        except ValueError:
            raise ValidationError(f"Invalid stock: {value!r}") from None
    if stock < 0 or stock > MAX_STOCK:
        raise ValidationError(f"Invalid stock: {value!r}")
    return stock


def price_text(price):
    # shortest plain form: 1.50 -> "1.5", 20.0 -> "20"
    return format(Decimal(price).normalize(), "f")


def money_from_db(value):
    return Decimal(str(value))


def stored_money(amount):
    """The amount as it reads back from a REAL column."""
    return money_from_db(float(amount))


def money_text(amount):
    return f"{amount:,.2f}"


#product model
class Product:
    def __init__(self, id, name, price, stock, image=None):
        self.id = id
        self.name = name
        self.price = price
        self.stock = stock
        self.image = image

    @classmethod
    def from_row(cls, row):
        return cls(row["id"], row["name"], money_from_db(row["price"]), int(row["stock"]), row["image"])

    def __eq__(self, other):
        if not isinstance(other, Product):
            return NotImplemented
        return (self.id, self.name, self.price, self.stock, self.image) == \
            (other.id, other.name, other.price, other.stock, other.image)

    def __repr__(self):
        return f"Product(id={self.id}, name={self.name!r}, price={self.price}, stock={self.stock})"


#cart entry: snapshot of the product at the moment it was added
CartEntry = namedtuple("CartEntry", ["product_id", "name", "price"])

#sale line item
SaleLine = namedtuple("SaleLine", ["position", "name", "price"])


#sale model
class Sale:
    def __init__(self, id, lines, total, datetime, products=None):
        self.id = id
        self.lines = list(lines)
        self.total = total
        self.datetime = datetime
        self._products = products

    @property
    def products(self):
        """Human-readable summary, e.g. ``Soda($1.5), Chips($2)``."""
        if self._products is not None:
            return self._products
        return summarize(self.lines)

    def __repr__(self):
        return f"Sale(id={self.id}, total={self.total}, datetime={self.datetime!r})"


def summarize(lines):
    return ", ".join(f"{line.name}({CURRENCY}{price_text(line.price)})" for line in lines)


class SessionState:
    """Input state of the main window: form fields, search text, payment text
    and the product currently open in the editor."""

    def __init__(self):
        self.reset_product_form()
        self.search = ""
        self.payment = ""
        self.editing = None

    def reset_product_form(self):
        self.name = ""
        self.price = ""
        self.stock = ""
        self.image = None

    def reset_payment(self):
        self.payment = ""
