from PyQt6.QtCore import QObject, QThread, pyqtSignal
import logging

from cashier.services.cashier_api import ApiResult, TRANSPORT_ERROR_STATUS


class APIWorker(QThread):
    done = pyqtSignal(object)  # ApiResult

    def __init__(self, call):
        """Runs one backend call off the UI thread."""
        super().__init__()
        self.call = call

    def run(self):
        try:
            result = self.call()
        except Exception as e:
            # the UI waits on `done`, it must always fire
            logging.exception("[APIWorker] backend call crashed")
            result = ApiResult(TRANSPORT_ERROR_STATUS, {"detail": f"Unexpected error: {e}"})
        self.done.emit(result)


class QtDispatcher(QObject):
    """Dispatcher backed by APIWorker threads; results arrive on the UI thread."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.workers = set()  # keep references until the thread ends

    def __call__(self, call, on_done):
        worker = APIWorker(call)
        worker.done.connect(on_done)
        worker.finished.connect(lambda: self._forget(worker))
        self.workers.add(worker)
        worker.start()

    def _forget(self, worker):
        self.workers.discard(worker)
        worker.deleteLater()

    def wait_all(self, msecs=3000):
        """Block until running workers end (used on shutdown)."""
        for worker in list(self.workers):
            worker.wait(msecs)
