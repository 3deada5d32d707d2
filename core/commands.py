import logging
import time
from typing import Callable, Dict, Optional

from core.event_system import (
    EventSystem, EventType, HelpToggledEventData, NotesListedEventData,
    StatusChangedEventData, StatusFlags, StatusMessageEventData,
)
from core.notes import NoteLedger
from core.presentation import DisplaySurface, SlideshowCoordinator
from core.verbosity import VerbosityController

_MESSAGE_TIMEOUT = 2000  # ms


class CommandDispatcher:
    """Maps the input layer's command names onto slideshow operations.

    One action per capability; ``dispatch`` never raises, so a broken
    handler cannot stop the slideshow.
    """

    def __init__(self, coordinator: SlideshowCoordinator, surface: DisplaySurface,
                 notes: NoteLedger, verbosity: VerbosityController, events: EventSystem):
        self.coordinator = coordinator
        self.surface = surface
        self.notes = notes
        self.verbosity = verbosity
        self.events = events
        self.help_visible = False
        self.actions: Dict[str, Callable[[], None]] = {}
        self._setup_actions()

    def _setup_actions(self):
        self.add_action("c", self.toggle_caption)
        self.add_action("f", self.toggle_focus)
        self.add_action("h", self.toggle_help)
        self.add_action("space", self.toggle_pause)
        self.add_action("right", self.go_next)
        self.add_action("left", self.go_previous)
        self.add_action("del", self.delete_current)
        self.add_action("n", self.add_note)
        self.add_action("l", self.list_notes)
        self.add_action("r", self.reset_notes)
        self.add_action("plus", self.speed_up)
        self.add_action("minus", self.slow_down)
        self.add_action("q", self.less_verbose)
        self.add_action("v", self.more_verbose)

    def add_action(self, command: str, callback: Callable[[], None]):
        self.actions[command] = callback
        logging.debug(f"Registered command '{command}' with callback {getattr(callback, '__name__', callback)}")

    def dispatch(self, command: str) -> bool:
        handler = self.actions.get(command)
        if handler is None:
            logging.debug(f"Unhandled command: {command}")
            return False
        try:
            handler()
        except Exception as e:
            # why: isolate handler crashes so one broken command can't stop the slideshow
            logging.error(f"Error executing command {command}: {e}", exc_info=True)
            return False
        return True

    def status_flags(self) -> StatusFlags:
        return StatusFlags(
            caption=bool(self.surface.show_caption),
            focus=self.coordinator.collection.in_focus_mode,
            paused=self.coordinator.paused,
            verbose=self.verbosity.is_debug,
        )

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def toggle_caption(self):
        self.surface.show_caption = not self.surface.show_caption
        self.surface.relayout()
        logging.debug("Show caption" if self.surface.show_caption else "Hide caption")
        self.publish_status()

    def toggle_focus(self):
        if self.coordinator.current_item is None:
            logging.debug("Can't toggle focus mode as there's no current image")
            return
        focused = self.coordinator.toggle_focus()
        self._publish_message(
            f"Focus: {len(self.coordinator.collection)} images" if focused else "Focus off"
        )
        self.publish_status()

    def toggle_help(self):
        self.help_visible = not self.help_visible
        self.events.publish(HelpToggledEventData(
            event_type=EventType.HELP_TOGGLED,
            source="dispatcher",
            timestamp=time.time(),
            visible=self.help_visible,
        ))
        self.surface.relayout()

    def toggle_pause(self):
        self.coordinator.toggle_pause()
        self.publish_status()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_next(self):
        self.coordinator.go_next()

    def go_previous(self):
        self.coordinator.go_previous()

    def delete_current(self):
        if self.coordinator.delete_current():
            self._publish_message(f"{len(self.coordinator.collection)} images left")

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def add_note(self):
        item = self.coordinator.current_item
        if item is None:
            logging.debug("Can't add a note, there's no current image")
            return
        if self.notes.add(item.url):
            self._publish_message(f"Noted ({len(self.notes)})")

    def list_notes(self):
        self.events.publish(NotesListedEventData(
            event_type=EventType.NOTES_LISTED,
            source="dispatcher",
            timestamp=time.time(),
            notes=tuple(self.notes.list()),
        ))

    def reset_notes(self):
        self.notes.reset()
        self._publish_message("Notes cleared")

    # ------------------------------------------------------------------
    # Rate and verbosity
    # ------------------------------------------------------------------

    def speed_up(self):
        if self.coordinator.speed_up():
            self._publish_timeout()

    def slow_down(self):
        if self.coordinator.slow_down():
            self._publish_timeout()

    def less_verbose(self):
        if self.verbosity.less_verbose():
            logging.debug(f"Logger level reduced to {self.verbosity.level_name}")
        else:
            logging.debug(f"Logger level unchanged: {self.verbosity.level_name}")
        self._publish_message(f"Log level {self.verbosity.level_name}")
        self.publish_status()

    def more_verbose(self):
        if self.verbosity.more_verbose():
            logging.debug(f"Logger level increased to {self.verbosity.level_name}")
        else:
            logging.debug(f"Logger level unchanged: {self.verbosity.level_name}")
        self._publish_message(f"Log level {self.verbosity.level_name}")
        self.publish_status()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _publish_timeout(self):
        self._publish_message(f"{self.coordinator.timeout_ms / 1000:.1f}s per image")

    def _publish_message(self, message: str, timeout: Optional[int] = _MESSAGE_TIMEOUT):
        self.events.publish(StatusMessageEventData(
            event_type=EventType.STATUS_MESSAGE,
            source="dispatcher",
            timestamp=time.time(),
            message=message,
            timeout=timeout or 0,
        ))

    def publish_status(self):
        self.events.publish(StatusChangedEventData(
            event_type=EventType.STATUS_CHANGED,
            source="dispatcher",
            timestamp=time.time(),
            flags=self.status_flags(),
        ))
