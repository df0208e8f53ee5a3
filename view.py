from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QLineEdit,
    QListWidget, QListWidgetItem, QHeaderView, QTableWidget, QTableWidgetItem,
    QDialog, QMessageBox, QFileDialog, QFormLayout, QGroupBox, QSizePolicy
)
from PyQt5.QtCore import Qt, pyqtSignal, QUrl
from PyQt5.QtGui import QPixmap, QFont, QBrush, QColor
from datavisualization import SalesChartPanel
from models import money_text, price_text
from settings import CURRENCY


def pixmap_for_uri(uri):
    """Load a preview for an image URI. Only local file URIs can be previewed."""
    if not uri:
        return None
    url = QUrl(uri)
    path = url.toLocalFile() if url.isLocalFile() else uri
    pix = QPixmap(path)
    return None if pix.isNull() else pix


def pick_image_uri(parent):
    path, _ = QFileDialog.getOpenFileName(parent, "Select Image", "", "Images (*.png *.jpg *.jpeg *.bmp)")
    if not path:
        return None
    return QUrl.fromLocalFile(path).toString()


class ImagePicker(QWidget):
    """Preview label plus a Browse button. Holds the selected image URI."""
    changed = pyqtSignal(object)

    def __init__(self, uri=None):
        super().__init__()
        layout = QHBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        self.preview = QLabel()
        self.preview.setFixedSize(64, 64)
        self.preview.setAlignment(Qt.AlignCenter)
        btn_browse = QPushButton("Select image")
        btn_browse.clicked.connect(self.browse_image)
        btn_clear = QPushButton("Clear")
        btn_clear.clicked.connect(lambda: self.set_uri(None))
        layout.addWidget(self.preview)
        layout.addWidget(btn_browse)
        layout.addWidget(btn_clear)
        layout.addStretch()
        self.setLayout(layout)
        self.set_uri(uri)

    def browse_image(self):
        uri = pick_image_uri(self)
        if uri:
            self.set_uri(uri)

    def set_uri(self, uri):
        self.uri = uri or None
        pix = pixmap_for_uri(self.uri)
        if pix is not None:
            self.preview.setPixmap(pix.scaled(self.preview.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation))
        else:
            self.preview.clear()
            self.preview.setText("No image" if not self.uri else "?")
        self.changed.emit(self.uri)


class ProductEditorDialog(QDialog):
    """Dialog to edit a product, including its image."""
    def __init__(self, product):
        super().__init__()
        self.setWindowTitle("Edit product")
        self.setMinimumSize(420, 240)
        self.product = product
        self.payload = None

        layout = QVBoxLayout()
        form = QFormLayout()

        self.input_name = QLineEdit(product.name)
        self.input_price = QLineEdit(price_text(product.price))
        self.input_stock = QLineEdit(str(product.stock))
        self.image_picker = ImagePicker(product.image)

        form.addRow("Name:", self.input_name)
        form.addRow("Price:", self.input_price)
        form.addRow("Stock:", self.input_stock)
        form.addRow("Image:", self.image_picker)

        btns = QHBoxLayout()
        btn_save = QPushButton("Save changes")
        btn_cancel = QPushButton("Cancel")
        btn_save.clicked.connect(self._on_save)
        btn_cancel.clicked.connect(self.reject)
        btns.addWidget(btn_save)
        btns.addWidget(btn_cancel)

        layout.addLayout(form)
        layout.addLayout(btns)
        self.setLayout(layout)

    def _on_save(self):
        name = self.input_name.text().strip()
        if not name:
            QMessageBox.warning(self, "Validation", "Name is required")
            return
        # numbers are validated by the inventory service
        self.payload = {
            'name': name,
            'price': self.input_price.text().strip(),
            'stock': self.input_stock.text().strip(),
            'image': self.image_picker.uri,
        }
        self.accept()


class InventoryView(QWidget):
    # Signals to Controller
    add_requested = pyqtSignal()
    search_query = pyqtSignal(str)
    item_added = pyqtSignal(int)      # product_id -> add to cart
    edit_requested = pyqtSignal(int)  # product_id
    delete_requested = pyqtSignal(int)  # product_id
    checkout_requested = pyqtSignal()
    reset_inventory_requested = pyqtSignal()

    def __init__(self):
        super().__init__()
        main_layout = QVBoxLayout()

        btn_reset = QPushButton("Reset inventory")
        btn_reset.clicked.connect(self.reset_inventory_requested.emit)

        # 1. Add product form
        add_box = QGroupBox("Add product")
        form = QFormLayout()
        self.input_name = QLineEdit()
        self.input_name.setPlaceholderText("Name")
        self.input_price = QLineEdit()
        self.input_price.setPlaceholderText("Price")
        self.input_stock = QLineEdit()
        self.input_stock.setPlaceholderText("Stock")
        self.image_picker = ImagePicker()
        btn_add = QPushButton("Add product")
        btn_add.clicked.connect(self.add_requested.emit)
        form.addRow("Name:", self.input_name)
        form.addRow("Price:", self.input_price)
        form.addRow("Stock:", self.input_stock)
        form.addRow("Image:", self.image_picker)
        form.addRow(btn_add)
        add_box.setLayout(form)

        # 2. Search + inventory table
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search by name or price")
        self.search_input.textChanged.connect(self.search_query.emit)

        self.table = QTableWidget()
        self.table.setColumnCount(6)
        self.table.setHorizontalHeaderLabels(["Image", "Name", "Price", "Stock", "", ""])
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.cellDoubleClicked.connect(self._on_row_activated)

        # 3. Cart
        cart_box = QGroupBox("Cart")
        cart_layout = QVBoxLayout()
        self.cart_list = QListWidget()
        self.lbl_total = QLabel(f"Total: {CURRENCY}0.00")
        self.lbl_total.setFont(QFont("Segoe UI", 14, QFont.Bold))
        self.input_payment = QLineEdit()
        self.input_payment.setPlaceholderText("Amount paid by the customer")
        self.btn_checkout = QPushButton("Calculate change")
        self.btn_checkout.clicked.connect(self.checkout_requested.emit)
        cart_layout.addWidget(self.cart_list)
        cart_layout.addWidget(self.lbl_total)
        cart_layout.addWidget(self.input_payment)
        cart_layout.addWidget(self.btn_checkout)
        cart_box.setLayout(cart_layout)
        cart_box.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Expanding)

        main_layout.addWidget(btn_reset)
        main_layout.addWidget(add_box)
        main_layout.addWidget(QLabel("<b>Inventory</b> (double-click a row to add it to the cart)"))
        main_layout.addWidget(self.search_input)
        main_layout.addWidget(self.table, 1)
        main_layout.addWidget(cart_box)
        self.setLayout(main_layout)

    def clear_product_form(self):
        self.input_name.clear()
        self.input_price.clear()
        self.input_stock.clear()
        self.image_picker.set_uri(None)

    def populate_products(self, products):
        self.table.setRowCount(0)
        self.table.setRowCount(len(products))
        for row, p in enumerate(products):
            img = QLabel()
            img.setAlignment(Qt.AlignCenter)
            pix = pixmap_for_uri(p.image)
            if pix is not None:
                img.setPixmap(pix.scaled(40, 40, Qt.KeepAspectRatio, Qt.SmoothTransformation))
            self.table.setCellWidget(row, 0, img)

            name_item = QTableWidgetItem(p.name)
            name_item.setData(Qt.UserRole, p.id)
            self.table.setItem(row, 1, name_item)
            self.table.setItem(row, 2, QTableWidgetItem(f"{CURRENCY}{money_text(p.price)}"))
            stock_item = QTableWidgetItem(str(p.stock) if p.stock > 0 else "OUT OF STOCK")
            if p.stock <= 0:
                stock_item.setForeground(QBrush(QColor("red")))
            self.table.setItem(row, 3, stock_item)

            btn_edit = QPushButton("Edit")
            btn_edit.clicked.connect(lambda ch, pid=p.id: self.edit_requested.emit(pid))
            self.table.setCellWidget(row, 4, btn_edit)

            btn_del = QPushButton("Delete")
            btn_del.setStyleSheet("background-color: #E74C3C;")
            btn_del.clicked.connect(lambda ch, pid=p.id: self.delete_requested.emit(pid))
            self.table.setCellWidget(row, 5, btn_del)

    def _on_row_activated(self, row, _col):
        item = self.table.item(row, 1)
        if item is not None:
            self.item_added.emit(int(item.data(Qt.UserRole)))

    def update_cart_display(self, entries, total):
        self.cart_list.clear()
        for e in entries:
            self.cart_list.addItem(QListWidgetItem(f"{e.name} - {CURRENCY}{money_text(e.price)}"))
        self.lbl_total.setText(f"Total: {CURRENCY}{money_text(total)}")


class HistoryView(QWidget):
    reset_history_requested = pyqtSignal()

    def __init__(self):
        super().__init__()
        layout = QVBoxLayout()
        top = QHBoxLayout()
        top.addWidget(QLabel("<b>Sales history</b>"))
        top.addStretch()
        btn_clear = QPushButton("Clear history")
        btn_clear.setStyleSheet("background-color: #E74C3C;")
        btn_clear.clicked.connect(self.reset_history_requested.emit)
        top.addWidget(btn_clear)

        self.sales_list = QListWidget()
        self.chart = SalesChartPanel()

        layout.addLayout(top)
        layout.addWidget(self.sales_list, 1)
        layout.addWidget(self.chart, 1)
        self.setLayout(layout)

    def populate_sales(self, sales):
        self.sales_list.clear()
        for s in sales:
            text = f"{s.datetime}\n{s.products}\nTotal: {CURRENCY}{money_text(s.total)}"
            self.sales_list.addItem(QListWidgetItem(text))
        self.chart.refresh_charts(sales)
