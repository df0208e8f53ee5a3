from PyQt5.QtWidgets import QMainWindow, QMessageBox, QTabWidget, QDialog
from view import InventoryView, HistoryView, ProductEditorDialog
from errors import InventoryError, InsufficientPaymentError, StorageError
from models import SessionState, money_text
from services import InventoryService, CartService, CheckoutService
from settings import CURRENCY
from log import get_logger

logger = get_logger(__name__)


class MainController(QMainWindow):
    def __init__(self, db):
        super().__init__()
        self.setWindowTitle("Inventory & Sales")
        self.resize(900, 900)

        # Core services
        self.inventory = InventoryService(db)
        self.cart = CartService(self.inventory)
        self.checkout = CheckoutService(db, self.cart)

        # Input state of the window
        self.state = SessionState()

        # Tabs
        self.tabs = QTabWidget()
        self.inventory_view = InventoryView()
        self.history_view = HistoryView()
        self.tabs.addTab(self.inventory_view, "Inventory")
        self.tabs.addTab(self.history_view, "Sales history")
        self.setCentralWidget(self.tabs)

        # Form fields -> session state
        iv = self.inventory_view
        iv.input_name.textChanged.connect(lambda t: setattr(self.state, 'name', t))
        iv.input_price.textChanged.connect(lambda t: setattr(self.state, 'price', t))
        iv.input_stock.textChanged.connect(lambda t: setattr(self.state, 'stock', t))
        iv.input_payment.textChanged.connect(lambda t: setattr(self.state, 'payment', t))
        iv.image_picker.changed.connect(lambda uri: setattr(self.state, 'image', uri))

        # Connect Signals
        iv.add_requested.connect(self.add_product)
        iv.search_query.connect(self.filter_search)
        iv.item_added.connect(self.add_to_cart)
        iv.edit_requested.connect(self.edit_product)
        iv.delete_requested.connect(self.delete_product)
        iv.checkout_requested.connect(self.calculate_change)
        iv.reset_inventory_requested.connect(self.reset_inventory)
        self.history_view.reset_history_requested.connect(self.reset_sales)
        self.history_view.chart.refresh_clicked.connect(self.load_sales)

        # Initial Load
        self.load_products()
        self.load_sales()
        self.update_cart_ui()

    def _report(self, title, error):
        if isinstance(error, StorageError):
            QMessageBox.critical(self, title, f"Storage error: {error}")
        else:
            QMessageBox.warning(self, title, str(error))

    def _confirm(self, title, question):
        resp = QMessageBox.question(self, title, question, QMessageBox.Yes | QMessageBox.No)
        return resp == QMessageBox.Yes

    # --- DATA ---
    def load_products(self):
        try:
            products = self.inventory.search(self.state.search)
        except InventoryError as e:
            self._report("Inventory", e)
            return
        self.inventory_view.populate_products(products)

    def load_sales(self):
        try:
            sales = self.checkout.list_sales()
        except InventoryError as e:
            self._report("Sales history", e)
            return
        self.history_view.populate_sales(sales)

    def filter_search(self, text):
        self.state.search = text
        self.load_products()

    # --- INVENTORY ---
    def add_product(self):
        s = self.state
        try:
            product = self.inventory.add_product(s.name, s.price, s.stock, s.image)
        except InventoryError as e:
            self._report("Add product", e)
            return
        logger.info("Added product %s from the form", product.id)
        s.reset_product_form()
        self.inventory_view.clear_product_form()
        self.load_products()

    def edit_product(self, product_id):
        try:
            product = self.inventory.get_product(product_id)
        except InventoryError as e:
            self._report("Edit product", e)
            self.load_products()
            return

        self.state.editing = product
        try:
            dlg = ProductEditorDialog(product)
            if dlg.exec_() != QDialog.Accepted:
                return
            p = dlg.payload
            try:
                self.inventory.edit_product(product_id, p['name'], p['price'], p['stock'], p['image'])
            except InventoryError as e:
                self._report("Edit product", e)
                return
        finally:
            self.state.editing = None
        self.load_products()

    def delete_product(self, product_id):
        try:
            product = self.inventory.get_product(product_id)
        except InventoryError as e:
            self._report("Delete product", e)
            self.load_products()
            return
        if not self._confirm("Delete product", f"Delete {product.name}?"):
            return
        try:
            self.inventory.delete_product(product_id)
        except InventoryError as e:
            self._report("Delete product", e)
            return
        self.load_products()

    def reset_inventory(self):
        if not self._confirm("Reset inventory", "Delete every product? This cannot be undone."):
            return
        try:
            self.inventory.reset_all()
        except InventoryError as e:
            self._report("Reset inventory", e)
            return
        self.load_products()

    # --- CART LOGIC ---
    def add_to_cart(self, product_id):
        try:
            product = self.inventory.get_product(product_id)
            self.cart.add_to_cart(product)
        except InventoryError as e:
            self._report("Cart", e)
        self.update_cart_ui()
        self.load_products()

    def update_cart_ui(self):
        self.inventory_view.update_cart_display(self.cart.entries, self.cart.get_total())

    # --- CHECKOUT ---
    def calculate_change(self):
        try:
            result = self.checkout.settle(self.state.payment)
        except InsufficientPaymentError as e:
            QMessageBox.warning(
                self, "Insufficient payment",
                f"The customer did not pay enough.\nTotal: {CURRENCY}{money_text(e.total)}\nPaid: {CURRENCY}{money_text(e.payment)}",
            )
            return
        except InventoryError as e:
            self._report("Checkout", e)
            return

        QMessageBox.information(
            self, "Result",
            f"Total: {CURRENCY}{money_text(result['total'])}\n"
            f"Paid: {CURRENCY}{money_text(result['payment'])}\n"
            f"Change: {CURRENCY}{money_text(result['change'])}",
        )
        self.state.reset_payment()
        self.inventory_view.input_payment.clear()
        self.update_cart_ui()
        self.load_sales()

    def reset_sales(self):
        if not self._confirm("Clear history", "Delete the whole sales history?"):
            return
        try:
            self.checkout.reset_sales_history()
        except InventoryError as e:
            self._report("Clear history", e)
            return
        self.load_sales()
