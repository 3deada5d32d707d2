from typing import Optional
from PySide6.QtWidgets import QMainWindow, QWidget, QStackedWidget, QLabel, QMessageBox, QVBoxLayout
from PySide6.QtCore import Qt, QTimer, Signal, Slot
import logging

from .slide_view import SlideView
from .status_overlay import StatusOverlay
from .help_overlay import HelpOverlay
from .hotkey_manager import HotkeyManager
from config.slideshow_source import SlideshowSource, SlideshowSourceLoader
from core.collection import Collection
from core.commands import CommandDispatcher
from core.event_system import (
    event_system as default_event_system, EventSystem, EventType,
    HelpToggledEventData, NotesListedEventData, SlideEventData,
)
from core.notes import NoteLedger
from core.presentation import SlideshowCoordinator
from core.timing import QtAdvanceTimer
from core.verbosity import VerbosityController

_STATUS_HEIGHT = 40
_STATUS_MAX_WIDTH = 600


class MainWindow(QMainWindow):
    _help_toggled = Signal(bool)
    _notes_listed = Signal(object)

    def __init__(self, config_manager, source_location: str, shuffle: Optional[bool] = None,
                 timeout_ms: Optional[int] = None, events: Optional[EventSystem] = None):
        super().__init__()
        self.config_manager = config_manager
        self.source_location = source_location
        self.events = events or default_event_system

        self.notes = NoteLedger()
        self.verbosity = VerbosityController()
        self.collection: Optional[Collection] = None
        self.coordinator: Optional[SlideshowCoordinator] = None
        self.dispatcher: Optional[CommandDispatcher] = None
        # Window-level commands work before the slideshow has loaded.
        self._window_actions = {"quit": self.close}

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        layout = QVBoxLayout(self.central_widget)
        layout.setContentsMargins(0, 0, 0, 0)

        self.stacked_widget = QStackedWidget()
        layout.addWidget(self.stacked_widget)

        self.slide_view = SlideView(self.config_manager, parent=self)
        self.stacked_widget.addWidget(self.slide_view)

        self.error_label = QLabel()
        self.error_label.setAlignment(Qt.AlignCenter)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #ff6060; background-color: black; font-size: 16pt;")
        self.stacked_widget.addWidget(self.error_label)

        self.status_overlay = StatusOverlay(self.events, self.config_manager, self.central_widget)
        self.hotkey_manager = HotkeyManager(self, self.config_manager.get("hotkeys", {}), self._dispatch)
        self.help_overlay = HelpOverlay(self.central_widget, self.hotkey_manager.definitions, self.config_manager)

        self.loader = SlideshowSourceLoader(
            source_location, config_manager, shuffle=shuffle, timeout_ms=timeout_ms, parent=self
        )
        self.loader.loaded.connect(self._on_source_loaded)
        self.loader.failed.connect(self._on_source_failed)

        self._setup_event_subscriptions()

        self.setWindowTitle("Photo slideshow")
        self.resize(1024, 768)
        self.status_overlay.setMessage(f"Loading {source_location}")

    def _setup_event_subscriptions(self):
        self._help_toggled.connect(self._set_help_visible)
        self._notes_listed.connect(self._show_notes)
        self.events.subscribe(EventType.HELP_TOGGLED, self._on_help_toggled)
        self.events.subscribe(EventType.NOTES_LISTED, self._on_notes_listed)
        self.events.subscribe(EventType.SLIDE_SHOWN, self._on_slide_shown)
        self.events.subscribe(EventType.SLIDE_FAILED, self._on_slide_failed)

    def _teardown_event_subscriptions(self):
        self.events.unsubscribe(EventType.HELP_TOGGLED, self._on_help_toggled)
        self.events.unsubscribe(EventType.NOTES_LISTED, self._on_notes_listed)
        self.events.unsubscribe(EventType.SLIDE_SHOWN, self._on_slide_shown)
        self.events.unsubscribe(EventType.SLIDE_FAILED, self._on_slide_failed)
        self.status_overlay.detach()

    def start(self):
        """Begin loading the slideshow source on the next event-loop tick."""
        QTimer.singleShot(0, self.loader.load)

    # ------------------------------------------------------------------
    # Source loading
    # ------------------------------------------------------------------

    @Slot(object)
    def _on_source_loaded(self, source: SlideshowSource):
        self.collection = Collection(source.images)
        self.coordinator = SlideshowCoordinator(
            self.collection,
            self.slide_view,
            self.notes,
            timer=QtAdvanceTimer(self),
            events=self.events,
        )
        self.slide_view.imageLoaded.connect(self.coordinator.on_image_loaded)
        self.slide_view.imageFailed.connect(self.coordinator.on_image_failed)

        self.dispatcher = CommandDispatcher(
            self.coordinator, self.slide_view, self.notes, self.verbosity, self.events
        )
        for command, callback in self._window_actions.items():
            self.dispatcher.add_action(command, callback)

        self.status_overlay.setMessage(f"{len(self.collection)} images", 2000)
        self.dispatcher.publish_status()
        self.coordinator.start(source.timeout_ms)

    @Slot(str)
    def _on_source_failed(self, message: str):
        self.error_label.setText(message)
        self.stacked_widget.setCurrentWidget(self.error_label)
        self.status_overlay.setMessage("")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _dispatch(self, command: str) -> bool:
        if self.dispatcher is not None:
            return self.dispatcher.dispatch(command)
        action = self._window_actions.get(command)
        if action is None:
            logging.debug(f"Ignoring '{command}', slideshow not loaded yet")
            return False
        action()
        return True

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_help_toggled(self, event_data: HelpToggledEventData):
        self._help_toggled.emit(event_data.visible)

    def _on_notes_listed(self, event_data: NotesListedEventData):
        self._notes_listed.emit(event_data.notes)

    def _on_slide_shown(self, event_data: SlideEventData):
        label = event_data.caption or event_data.url
        self.setWindowTitle(f"[{event_data.index + 1}/{event_data.count}] {label}")

    def _on_slide_failed(self, event_data: SlideEventData):
        self.status_overlay.setMessage(f"Can't load {event_data.url}", 2000)

    @Slot(bool)
    def _set_help_visible(self, visible: bool):
        self.help_overlay.set_open(visible)

    @Slot(object)
    def _show_notes(self, notes):
        text = "\n".join(notes) if notes else "No notes"
        QMessageBox.information(self, "Notes", text)

    # ------------------------------------------------------------------
    # Qt overrides
    # ------------------------------------------------------------------

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._position_overlays()

    def _position_overlays(self):
        width = self.central_widget.width()
        status_width = min(_STATUS_MAX_WIDTH, width)
        self.status_overlay.setGeometry(width - status_width, 0, status_width, _STATUS_HEIGHT)
        self.status_overlay.raise_()
        if self.help_overlay.isVisible():
            self.help_overlay.position_center()
            self.help_overlay.raise_()

    def closeEvent(self, event):
        logging.info("Closing slideshow window")
        if self.coordinator is not None:
            self.coordinator.stop()
        self._teardown_event_subscriptions()
        super().closeEvent(event)
