from PySide6.QtCore import QObject
from typing import Dict, List, Callable, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import logging
import threading


class EventType(Enum):
    # Presentation events
    SLIDE_SHOWN = "slide_shown"
    SLIDE_FAILED = "slide_failed"

    # Status / overlay events
    STATUS_CHANGED = "status_changed"
    STATUS_MESSAGE = "status_message"
    HELP_TOGGLED = "help_toggled"
    NOTES_LISTED = "notes_listed"


@dataclass
class EventData:
    event_type: EventType
    source: str  # Publishing component name
    timestamp: float


@dataclass
class SlideEventData(EventData):
    url: str
    index: int
    count: int
    caption: Optional[str] = None


@dataclass
class StatusFlags:
    caption: bool = False
    focus: bool = False
    paused: bool = False
    verbose: bool = False

    def letters(self) -> str:
        """Single-letter indicators in display order: C, F, P, V."""
        return "".join(
            letter for letter, on in (
                ("C", self.caption),
                ("F", self.focus),
                ("P", self.paused),
                ("V", self.verbose),
            ) if on
        )


@dataclass
class StatusChangedEventData(EventData):
    flags: StatusFlags


@dataclass
class StatusMessageEventData(EventData):
    message: str
    timeout: int = 0  # ms; 0 = until replaced


@dataclass
class HelpToggledEventData(EventData):
    visible: bool


@dataclass
class NotesListedEventData(EventData):
    notes: Tuple[str, ...] = field(default_factory=tuple)


class EventSystem(QObject):
    def __init__(self):
        super().__init__()
        self._subscribers: Dict[EventType, List[Callable]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: EventType, callback: Callable[[EventData], None]):
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            self._subscribers[event_type].append(callback)
        logging.debug(f"Subscribed to {event_type.value}: {getattr(callback, '__name__', callback)}")

    def unsubscribe(self, event_type: EventType, callback: Callable[[EventData], None]):
        with self._lock:
            if event_type in self._subscribers:
                try:
                    self._subscribers[event_type].remove(callback)
                    logging.debug(f"Unsubscribed from {event_type.value}: {getattr(callback, '__name__', callback)}")
                except ValueError:
                    logging.warning(f"Callback not found for {event_type.value}")

    def publish(self, event_data: EventData):
        with self._lock:
            event_type = event_data.event_type
            # Snapshot the subscriber list so callbacks can safely call subscribe/unsubscribe.
            callbacks = list(self._subscribers.get(event_type, []))

        for callback in callbacks:
            try:
                callback(event_data)
            except Exception as e:
                # why: isolate handler crashes so one broken subscriber can't block others
                logging.error(f"Error in event callback for {event_type.value}: {e}", exc_info=True)

        logging.debug("Published event: %s from %s", event_type.value, event_data.source)


event_system = EventSystem()
