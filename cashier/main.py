from PyQt6.QtWidgets import (QApplication, QMainWindow, QStackedWidget)
import logging
import sys

from cashier.core.config import settings
from cashier.core.token_store import TokenStore
from cashier.model.session import Step
from cashier.services.cashier_api import CashierApi
from cashier.services.flow_controller import SessionController
from cashier.thread.api_worker import QtDispatcher
from cashier.ui.login_screen import LoginScreen
from cashier.ui.catalogue_screen import CatalogueScreen
from cashier.ui.identify_screen import IdentifyScreen
from cashier.ui.checkout_screen import CheckoutScreen

LOGIN_INDEX = 0


class CashierApp(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Cashier")
        self.setGeometry(100, 100, 1280, 900)
        self.setStyleSheet("background-color: #F7FAFC;")

        self.dispatcher = QtDispatcher(self)
        self.controller = SessionController(
            CashierApi(),
            self.dispatcher,
            TokenStore(),
            on_change=self.on_state_changed,
        )

        self.stacked = QStackedWidget()

        # screens, in stacked order
        self.login_screen = LoginScreen(self.controller)
        self.catalogue_screen = CatalogueScreen(self.controller)
        self.identify_screen = IdentifyScreen(self.controller, self.dispatcher)
        self.checkout_screen = CheckoutScreen(self.controller)

        self.stacked.addWidget(self.login_screen)       # index 0
        self.stacked.addWidget(self.catalogue_screen)   # index 1 = Step.CATALOGUE + 1
        self.stacked.addWidget(self.identify_screen)    # index 2
        self.stacked.addWidget(self.checkout_screen)    # index 3
        self.screens = [self.login_screen, self.catalogue_screen, self.identify_screen, self.checkout_screen]

        self.setCentralWidget(self.stacked)

        self.controller.restore()
        self.on_state_changed()

    def on_state_changed(self):
        """Show the screen of the current step and redraw it"""
        step = self.controller.step
        index = LOGIN_INDEX if step is None else int(step) + 1

        if index != self.stacked.currentIndex():
            logging.info(f"[Screen] {self.stacked.currentIndex()} -> {index}")
            self.stacked.setCurrentIndex(index)
            if step is Step.CATALOGUE:
                # prices and stock may have changed since the last customer
                self.controller.load_inventory()

        self.screens[index].refresh()

    def closeEvent(self, event):
        self.identify_screen.face_capture.stop()
        self.dispatcher.wait_all()
        super().closeEvent(event)


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    app = QApplication(sys.argv)
    window = CashierApp()
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
