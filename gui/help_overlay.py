from typing import Dict, List, Tuple

from PySide6.QtWidgets import QGridLayout, QLabel, QWidget
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
import logging

from config.hotkeys import HotkeyDefinition


def build_rows(definitions: Dict[str, HotkeyDefinition]) -> List[Tuple[str, str]]:
    """One ``(keys, description)`` row per command, in definition order."""
    return [(d.keys_label(), d.description or d.command) for d in definitions.values()]


class HelpOverlay(QWidget):
    """Two-column list of keys and what they do, toggled by the help command."""

    def __init__(self, parent: QWidget, definitions: Dict[str, HotkeyDefinition], config_manager=None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WA_StyledBackground)
        self.setMinimumWidth(300)
        self.config_manager = config_manager
        self._rows = build_rows(definitions)
        self._build_layout()
        self.hide()

    def _build_layout(self):
        font = self._font()
        layout = QGridLayout(self)
        layout.setContentsMargins(20, 16, 20, 16)
        layout.setHorizontalSpacing(16)
        layout.setVerticalSpacing(4)
        for row, (keys, description) in enumerate(self._rows):
            keys_label = QLabel(keys)
            keys_label.setFont(QFont(font.family(), font.pointSize(), QFont.Bold))
            keys_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            description_label = QLabel(description)
            description_label.setFont(font)
            layout.addWidget(keys_label, row, 0)
            layout.addWidget(description_label, row, 1)
        self.setStyleSheet("HelpOverlay { background-color: rgba(0, 0, 0, 200); border-radius: 8px; }"
                           "QLabel { color: white; }")

    def _font(self) -> QFont:
        family, size = "Arial", 14
        if self.config_manager:
            try:
                family = self.config_manager.get("gui.status_font", family)
                size = int(self.config_manager.get("gui.status_font_size", size))
            except (TypeError, ValueError) as e:
                logging.warning(f"Could not apply help overlay font settings: {e}")
        return QFont(family, size)

    def set_open(self, visible: bool):
        if visible:
            self.adjustSize()
            self.position_center()
            self.show()
            self.raise_()
        else:
            self.hide()

    def position_center(self):
        parent = self.parentWidget()
        if parent:
            self.move(parent.width() // 2 - self.width() // 2,
                      parent.height() // 2 - self.height() // 2)
