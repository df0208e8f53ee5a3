from PyQt5.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton
from PyQt5.QtCore import pyqtSignal
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
import matplotlib.pyplot as plt

from services import daily_totals
from settings import CURRENCY


class SalesChartPanel(QWidget):
    """Daily sales line chart built from the sales history.

    The controller passes the sales list in; the panel never touches the database.
    """
    refresh_clicked = pyqtSignal()

    def __init__(self):
        super().__init__()
        layout = QVBoxLayout()

        controls = QHBoxLayout()
        self.lbl_summary = QLabel("No sales yet")
        btn_refresh = QPushButton("Refresh")
        btn_refresh.clicked.connect(self.refresh_clicked.emit)
        controls.addWidget(self.lbl_summary)
        controls.addStretch()
        controls.addWidget(btn_refresh)

        self.chart = FigureCanvas(plt.Figure(figsize=(5, 3)))

        layout.addLayout(controls)
        layout.addWidget(self.chart)
        self.setLayout(layout)

    def refresh_charts(self, sales):
        points = daily_totals(sales)
        days = [d for d, _ in points]
        totals = [float(t) for _, t in points]

        fig = self.chart.figure
        fig.clear()
        ax = fig.add_subplot(111)
        if days:
            ax.plot(days, totals, marker='o', color='#1f77b4')
            ax.set_title('Daily Sales')
            ax.set_xlabel('Date')
            ax.set_ylabel(f'Total Sales ({CURRENCY})')
            ax.tick_params(axis='x', rotation=45)
            grand = sum(t for _, t in points)
            self.lbl_summary.setText(f"{len(sales)} sales, {CURRENCY} {grand:,.2f} total")
        else:
            ax.text(0.5, 0.5, 'No sales yet', ha='center', va='center')
            self.lbl_summary.setText("No sales yet")
        fig.tight_layout()
        self.chart.draw()
