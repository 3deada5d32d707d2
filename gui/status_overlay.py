from PySide6.QtWidgets import QLabel, QWidget, QHBoxLayout
from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QFont
import logging

from core.event_system import (
    EventSystem, EventType, StatusChangedEventData, StatusFlags, StatusMessageEventData,
)


class StatusOverlay(QWidget):
    """Top-right corner overlay: a transient message and the C/F/P/V mode letters."""

    _flags_changed = Signal(object)
    _message_received = Signal(str, int)

    def __init__(self, event_system: EventSystem, config_manager=None, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WA_TranslucentBackground)
        self.config_manager = config_manager
        self.event_system = event_system
        self._flags = StatusFlags()

        self._message_timer = QTimer(self)
        self._message_timer.setSingleShot(True)
        self._message_timer.timeout.connect(self._clear_message)

        self._build_layout()
        self._apply_font_settings()

        # Marshal bus callbacks onto the GUI thread.
        self._flags_changed.connect(self._apply_flags)
        self._message_received.connect(self.setMessage)
        event_system.subscribe(EventType.STATUS_CHANGED, self._on_status_changed)
        event_system.subscribe(EventType.STATUS_MESSAGE, self._on_status_message)

    def _build_layout(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(12)

        self._message_label = QLabel()
        self._message_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        layout.addWidget(self._message_label, 1)

        self._flags_label = QLabel()
        self._flags_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        layout.addWidget(self._flags_label)

    def _apply_font_settings(self):
        try:
            if self.config_manager:
                font_family = self.config_manager.get("gui.status_font", "Arial")
                font_size = self.config_manager.get("gui.status_font_size", 14)
                color = self.config_manager.get("gui.status_color", "#f5a623")
            else:
                font_family, font_size, color = "Arial", 14, "#f5a623"
            self._message_label.setFont(QFont(font_family, font_size))
            self._flags_label.setFont(QFont(font_family, font_size + 6, QFont.Bold))
            style = f"color: {color};"
            self._message_label.setStyleSheet(style)
            self._flags_label.setStyleSheet(style)
        except Exception as e:  # why: config_manager is user-supplied; malformed config must not crash the overlay at startup
            logging.warning(f"Could not apply status overlay font settings: {e}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def flags(self) -> StatusFlags:
        return self._flags

    def flags_text(self) -> str:
        return self._flags_label.text()

    def message_text(self) -> str:
        return self._message_label.text()

    @Slot(str, int)
    def setMessage(self, message: str, timeout: int = 0):
        self._message_timer.stop()
        self._message_label.setText(message)
        if timeout > 0:
            self._message_timer.start(timeout)

    def detach(self):
        self.event_system.unsubscribe(EventType.STATUS_CHANGED, self._on_status_changed)
        self.event_system.unsubscribe(EventType.STATUS_MESSAGE, self._on_status_message)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_status_changed(self, event_data: StatusChangedEventData):
        self._flags_changed.emit(event_data.flags)

    def _on_status_message(self, event_data: StatusMessageEventData):
        self._message_received.emit(event_data.message, event_data.timeout)

    @Slot(object)
    def _apply_flags(self, flags: StatusFlags):
        self._flags = flags
        self._flags_label.setText(" ".join(flags.letters()))

    def _clear_message(self):
        self._message_label.setText("")
