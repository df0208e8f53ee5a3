#Error types raised by the store and the services.
#The controller catches InventoryError and shows the message to the user.


class InventoryError(Exception):
    """Base class for every error the core reports to its caller."""


class ValidationError(InventoryError):
    pass


class NotFoundError(InventoryError):
    pass


class InsufficientStockError(InventoryError):
    pass


class OutOfStockError(InventoryError):
    pass


class InvalidPaymentError(InventoryError):
    pass


class InsufficientPaymentError(InventoryError):
    def __init__(self, total, payment):
        super().__init__(f"Payment {payment} is less than the total {total}")
        self.total = total
        self.payment = payment


class StorageError(InventoryError):
    pass
