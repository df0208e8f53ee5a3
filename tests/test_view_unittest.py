import os
import tempfile
import unittest
from decimal import Decimal
from unittest import mock
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

try:
    from PyQt5.QtWidgets import QApplication
    from view import InventoryView, HistoryView, ProductEditorDialog
    import controller
    PYQT_AVAILABLE = True
except Exception:
    PYQT_AVAILABLE = False

from database import DatabaseManager
from models import CartEntry, Product, Sale, SaleLine


class MsgBoxStub:
    Yes = 1
    No = 0

    def __init__(self, answer=1):
        self.answer = answer
        self.calls = []

    def warning(self, *args, **kwargs):
        self.calls.append(('warning', args))

    def information(self, *args, **kwargs):
        self.calls.append(('info', args))

    def critical(self, *args, **kwargs):
        self.calls.append(('crit', args))

    def question(self, *args, **kwargs):
        self.calls.append(('question', args))
        return self.answer


@unittest.skipUnless(PYQT_AVAILABLE, 'PyQt5 not available in test environment')
class ViewTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def test_inventory_view_populate_and_cart(self):
        view = InventoryView()
        view.populate_products([
            Product(1, 'Soda', Decimal('1.5'), 3, None),
            Product(2, 'Chips', Decimal('2'), 0, 'file:///does/not/exist.png'),
        ])
        self.assertEqual(view.table.rowCount(), 2)
        self.assertEqual(view.table.item(1, 3).text(), 'OUT OF STOCK')

        added = []
        view.item_added.connect(added.append)
        view._on_row_activated(0, 1)
        self.assertEqual(added, [1])

        view.update_cart_display([CartEntry(1, 'Soda', Decimal('1.5'))], Decimal('1.5'))
        self.assertEqual(view.cart_list.count(), 1)
        self.assertIn('1.50', view.lbl_total.text())

    def test_history_view_with_and_without_sales(self):
        view = HistoryView()
        view.populate_sales([])
        self.assertEqual(view.sales_list.count(), 0)
        self.assertEqual(view.chart.lbl_summary.text(), 'No sales yet')

        view.populate_sales([Sale(1, [SaleLine(0, 'Soda', Decimal('3'))], Decimal('3'), '2025-01-01 10:00:00')])
        self.assertEqual(view.sales_list.count(), 1)
        self.assertIn('3.00', view.sales_list.item(0).text())

    def test_editor_requires_name(self):
        dlg = ProductEditorDialog(Product(1, 'Soda', Decimal('1.5'), 3, None))
        dlg.input_name.setText('')
        with mock.patch('view.QMessageBox') as mb:
            dlg._on_save()
            self.assertTrue(mb.warning.called)
        self.assertIsNone(dlg.payload)

        dlg.input_name.setText('Cola')
        dlg._on_save()
        self.assertEqual(dlg.payload['name'], 'Cola')
        self.assertEqual(dlg.payload['price'], '1.5')


@unittest.skipUnless(PYQT_AVAILABLE, 'PyQt5 not available in test environment')
class ControllerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        tf = tempfile.NamedTemporaryFile(delete=False, suffix='.db')
        tf.close()
        self.db_path = tf.name
        self.mgr = DatabaseManager(db_name=self.db_path)

        self.msgbox = MsgBoxStub()
        self._mb_patch = mock.patch.object(controller, 'QMessageBox', self.msgbox)
        self._mb_patch.start()
        self.C = controller.MainController(self.mgr)

    def tearDown(self):
        self._mb_patch.stop()
        try:
            os.unlink(self.db_path)
        except Exception:
            pass

    def _fill_form(self, name, price, stock):
        iv = self.C.inventory_view
        iv.input_name.setText(name)
        iv.input_price.setText(price)
        iv.input_stock.setText(stock)

    def test_add_product_from_form_clears_state(self):
        self._fill_form('Soda', '1.50', '3')
        self.assertEqual(self.C.state.name, 'Soda')
        self.C.add_product()
        self.assertEqual([p.name for p in self.mgr.list_products()], ['Soda'])
        self.assertEqual(self.C.state.name, '')
        self.assertEqual(self.C.inventory_view.table.rowCount(), 1)

    def test_invalid_form_warns_and_adds_nothing(self):
        self._fill_form('Soda', 'abc', '3')
        self.C.add_product()
        self.assertEqual(self.mgr.list_products(), [])
        self.assertEqual(self.msgbox.calls[-1][0], 'warning')

    def test_sell_and_settle(self):
        p = self.C.inventory.add_product('Soda', '1.50', 3)
        self.C.add_to_cart(p.id)
        self.C.add_to_cart(p.id)
        self.assertEqual(self.C.cart.size, 2)

        self.C.inventory_view.input_payment.setText('2')
        self.C.calculate_change()
        self.assertEqual(self.msgbox.calls[-1][0], 'warning')
        self.assertEqual(self.C.cart.size, 2)

        self.C.inventory_view.input_payment.setText('5')
        self.C.calculate_change()
        self.assertEqual(self.msgbox.calls[-1][0], 'info')
        self.assertEqual(self.C.cart.size, 0)
        self.assertEqual(len(self.mgr.list_sales()), 1)
        self.assertEqual(self.C.state.payment, '')
        self.assertEqual(self.C.history_view.sales_list.count(), 1)

    def test_out_of_stock_is_reported(self):
        p = self.C.inventory.add_product('Chips', '2', 0)
        self.C.add_to_cart(p.id)
        self.assertEqual(self.C.cart.size, 0)
        self.assertEqual(self.msgbox.calls[-1][0], 'warning')

    def test_destructive_actions_need_confirmation(self):
        p = self.C.inventory.add_product('Soda', '1.50', 3)
        self.msgbox.answer = MsgBoxStub.No
        self.C.delete_product(p.id)
        self.C.reset_inventory()
        self.assertEqual(len(self.mgr.list_products()), 1)

        self.msgbox.answer = MsgBoxStub.Yes
        self.C.delete_product(p.id)
        self.assertEqual(self.mgr.list_products(), [])

    def test_search_filters_table(self):
        self.C.inventory.add_product('Soda', '1.50', 3)
        self.C.inventory.add_product('Chips', '2', 3)
        self.C.filter_search('sod')
        self.assertEqual(self.C.inventory_view.table.rowCount(), 1)
        self.C.filter_search('')
        self.assertEqual(self.C.inventory_view.table.rowCount(), 2)


if __name__ == '__main__':
    unittest.main()
