from PySide6.QtWidgets import QDialog, QVBoxLayout, QTextEdit, QPushButton
from PySide6.QtCore import QObject, Signal
import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class QtLogHandler(logging.Handler, QObject):
    """
    Logging handler that forwards each formatted record through a Qt signal,
    so records from the editors end up in the log dialog.
    """
    log_signal = Signal(str)

    def __init__(self):
        logging.Handler.__init__(self)
        QObject.__init__(self)

    def emit(self, record):
        msg = self.format(record)
        self.log_signal.emit(msg)


class LogWindow(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Shortcut Kit Logs")
        self.resize(600, 400)

        layout = QVBoxLayout(self)

        self.text_area = QTextEdit()
        self.text_area.setReadOnly(True)
        layout.addWidget(self.text_area)

        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.text_area.clear)
        layout.addWidget(clear_btn)

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.hide)
        layout.addWidget(close_btn)

    def append_log(self, message: str):
        self.text_area.append(message)
