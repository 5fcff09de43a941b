from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
                               QGroupBox, QLabel, QLineEdit, QComboBox, QCheckBox, QPushButton,
                               QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
                               QMessageBox)
import logging
from pathlib import Path
from typing import Optional

from shortcutkit.errors import VdfError
from shortcutkit.installer import ShortcutRequest, install_shortcut
from shortcutkit.settings import SettingsManager
from shortcutkit.shortcut_editor import ShortcutEditor
from shortcutkit.steam_paths import SteamPathDetector
from shortcutkit.steam_vdf import VdfParser
from shortcutkit_ui.log_window import LOG_FORMAT, LogWindow, QtLogHandler

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Steam Shortcut Kit")
        self.resize(900, 650)

        self.settings = SettingsManager()
        self.steam_root: Optional[Path] = None

        # Setup Logging
        self.setup_logging()

        self.init_ui()
        self.detect_steam()

    def setup_logging(self):
        self.log_window = LogWindow(self)

        handler = QtLogHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.log_signal.connect(self.log_window.append_log)

        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.INFO)

        try:
            file_handler = logging.FileHandler("shortcutkit.log")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    def show_log_window(self):
        self.log_window.show()
        self.log_window.raise_()
        self.log_window.activateWindow()

    def init_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        # Steam location
        steam_group = QGroupBox("Steam Installation")
        steam_layout = QHBoxLayout()
        self.steam_path_input = QLineEdit()
        self.steam_path_input.setPlaceholderText("Auto-detect")
        self.steam_path_input.setText(self.settings.steam_path)
        self.steam_path_input.editingFinished.connect(self.detect_steam)
        steam_layout.addWidget(self.steam_path_input)

        self.user_combo = QComboBox()
        self.user_combo.currentTextChanged.connect(self.on_user_changed)
        steam_layout.addWidget(QLabel("User:"))
        steam_layout.addWidget(self.user_combo)
        steam_group.setLayout(steam_layout)
        layout.addWidget(steam_group)

        # Existing shortcuts
        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Name", "AppID", "Executable"])
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.Stretch)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        layout.addWidget(self.table)

        # New shortcut form
        form_group = QGroupBox("Add Shortcut")
        form = QFormLayout()
        self.name_input = QLineEdit()
        self.exe_input = QLineEdit()
        self.start_dir_input = QLineEdit()
        self.start_dir_input.setPlaceholderText("Executable's folder")
        self.icon_input = QLineEdit()
        self.options_input = QLineEdit()
        self.template_input = QLineEdit()
        self.template_input.setText(self.settings.get("controller_template", ""))
        self.template_input.setPlaceholderText("Leave empty to keep controller config untouched")
        form.addRow("Name", self.name_input)
        form.addRow("Executable", self.exe_input)
        form.addRow("Start In", self.start_dir_input)
        form.addRow("Icon", self.icon_input)
        form.addRow("Launch Options", self.options_input)
        form.addRow("Controller Template", self.template_input)

        flags = self.settings.shortcut_flags
        flags_layout = QHBoxLayout()
        self.flag_checks = {}
        for key, label in [("is_hidden", "Hidden"), ("allow_overlay", "Overlay"),
                           ("allow_desktop_config", "Desktop Config"), ("openvr", "OpenVR")]:
            chk = QCheckBox(label)
            chk.setChecked(flags.get(key, False))
            flags_layout.addWidget(chk)
            self.flag_checks[key] = chk
        form.addRow("Flags", flags_layout)
        form_group.setLayout(form)
        layout.addWidget(form_group)

        buttons = QHBoxLayout()
        self.btn_add = QPushButton("Add to Steam")
        self.btn_add.clicked.connect(self.add_shortcut)
        buttons.addWidget(self.btn_add)

        logs_btn = QPushButton("Show Logs")
        logs_btn.clicked.connect(self.show_log_window)
        buttons.addWidget(logs_btn)
        layout.addLayout(buttons)

    def detect_steam(self):
        override = self.steam_path_input.text().strip()
        self.steam_root = SteamPathDetector.get_steam_install_path(override)
        if override != self.settings.steam_path:
            self.settings.steam_path = override

        self.user_combo.blockSignals(True)
        self.user_combo.clear()
        userdata = SteamPathDetector.get_userdata_path(self.steam_root)
        if userdata:
            self.user_combo.addItems(SteamPathDetector.get_user_ids(userdata))
            saved = self.settings.user_id
            if saved and self.user_combo.findText(saved) >= 0:
                self.user_combo.setCurrentText(saved)
        else:
            logger.warning("Could not find Steam userdata folder.")
        self.user_combo.blockSignals(False)

        self.refresh_shortcuts()

    def on_user_changed(self, user_id: str):
        if user_id and user_id != self.settings.user_id:
            self.settings.user_id = user_id
        self.refresh_shortcuts()

    def current_shortcuts_path(self) -> Optional[Path]:
        userdata = SteamPathDetector.get_userdata_path(self.steam_root)
        user_id = self.user_combo.currentText()
        if not userdata or not user_id:
            return None
        return SteamPathDetector.get_shortcuts_path(userdata, user_id)

    def refresh_shortcuts(self):
        self.table.setRowCount(0)
        path = self.current_shortcuts_path()
        if path is None or not path.exists():
            return

        try:
            data = VdfParser.load_binary(str(path))
            shortcuts = ShortcutEditor.list_shortcuts(data)
        except (VdfError, OSError) as e:
            logger.error(f"Error parsing shortcuts {path}: {e}")
            return

        self.table.setRowCount(len(shortcuts))
        for row, info in enumerate(shortcuts):
            self.table.setItem(row, 0, QTableWidgetItem(info.app_name))
            self.table.setItem(row, 1, QTableWidgetItem(str(info.appid or "")))
            self.table.setItem(row, 2, QTableWidgetItem(info.exe))

    def confirm_overwrite(self, app_name: str, existing_key: str) -> bool:
        reply = QMessageBox.question(
            self, "Shortcut Exists",
            f"A shortcut named '{app_name}' already exists. Replace it?",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
        return reply == QMessageBox.Yes

    def add_shortcut(self):
        shortcuts_path = self.current_shortcuts_path()
        if shortcuts_path is None:
            QMessageBox.warning(self, "Error", "No Steam user selected.")
            return

        name = self.name_input.text().strip()
        exe = self.exe_input.text().strip()
        if not name or not exe:
            QMessageBox.warning(self, "Error", "Name and executable are required.")
            return

        template = self.template_input.text().strip() or None
        request = ShortcutRequest(
            app_name=name,
            exe=exe,
            start_dir=self.start_dir_input.text().strip(),
            icon=self.icon_input.text().strip(),
            launch_options=self.options_input.text().strip(),
            controller_template=template,
            **{key: chk.isChecked() for key, chk in self.flag_checks.items()},
        )
        configset_path = None
        if template and self.steam_root:
            configset_path = SteamPathDetector.get_configset_path(self.steam_root, self.user_combo.currentText())

        editor = ShortcutEditor(confirm_overwrite=self.confirm_overwrite)
        try:
            appid = install_shortcut(shortcuts_path, request, editor, configset_path)
        except (VdfError, OSError) as e:
            logger.error(f"Failed to add shortcut '{name}': {e}")
            QMessageBox.warning(self, "Error", f"Failed to add shortcut:\n{e}")
            return

        self.settings.set("controller_template", template or "")
        self.refresh_shortcuts()
        QMessageBox.information(self, "Success",
                                f"Added '{name}' (appid {appid}). Restart Steam to see it.")
