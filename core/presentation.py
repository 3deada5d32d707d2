import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from core.collection import Collection, ImageDescriptor
from core.event_system import EventSystem, EventType, SlideEventData
from core.notes import NoteLedger
from core.timing import QtAdvanceTimer, monotonic_clock

DEFAULT_TIMEOUT = 5000
MINIMUM_TIMEOUT = 500
TIMEOUT_STEP = 500


class DisplaySurface(Protocol):
    """What the coordinator needs from whatever prepares and paints images.

    ``preload`` must answer later, exactly once, by calling back
    ``on_image_loaded`` or ``on_image_failed`` with the same item and index.
    """
    show_caption: bool

    def preload(self, item: ImageDescriptor, index: int) -> None: ...
    def cancel_preload(self) -> None: ...
    def show_preloaded(self) -> None: ...
    def relayout(self) -> None: ...


class AdvanceTimer(Protocol):
    def start(self, delay_ms: int, callback: Callable[[], None]) -> None: ...
    def stop(self) -> None: ...


class Phase(Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    WAITING = "waiting"
    SHOWING = "showing"
    PAUSED = "paused"


@dataclass
class PresentationState:
    timeout_ms: int = DEFAULT_TIMEOUT
    current_index: Optional[int] = None
    pending_index: Optional[int] = None
    pending_url: Optional[str] = None
    paused: bool = False
    last_shown_at: Optional[float] = None  # clock seconds; None = show as soon as ready
    phase: Phase = Phase.IDLE

    def clear_pending(self) -> None:
        self.pending_index = None
        self.pending_url = None


class SlideshowCoordinator:
    """Drives the prepare-then-show loop over a ``Collection``.

    Every move to another image goes through ``preload``. A prepared image
    is shown once the configured delay since the previous show has passed;
    preparation time counts towards that delay. Callbacks that don't match
    the request currently pending are stale and ignored.
    """

    def __init__(self, collection: Collection, surface: DisplaySurface, notes: NoteLedger,
                 timer: Optional[AdvanceTimer] = None,
                 clock: Callable[[], float] = monotonic_clock,
                 events: Optional[EventSystem] = None):
        self.collection = collection
        self.surface = surface
        self.notes = notes
        self.state = PresentationState()
        self._timer = timer if timer is not None else QtAdvanceTimer()
        self._clock = clock
        self._events = events

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def paused(self) -> bool:
        return self.state.paused

    @property
    def timeout_ms(self) -> int:
        return self.state.timeout_ms

    @property
    def current_item(self) -> Optional[ImageDescriptor]:
        return self.collection.item_at(self.state.current_index)

    def next_index(self) -> int:
        current = self.state.current_index
        if current is None:
            return 0
        next_index = current + 1
        if next_index >= len(self.collection):
            logging.debug("Reached last image, looping back to first")
            return 0
        return next_index

    def previous_index(self) -> int:
        count = len(self.collection)
        current = self.state.current_index
        if current is None or current - 1 < 0:
            return count - 1
        return min(current - 1, count - 1)

    # ------------------------------------------------------------------
    # The loop
    # ------------------------------------------------------------------

    def start(self, timeout_ms: Optional[int] = None) -> None:
        if timeout_ms is not None:
            self.state.timeout_ms = max(MINIMUM_TIMEOUT, int(timeout_ms))
        logging.info(f"Starting slideshow: {len(self.collection)} images, {self.state.timeout_ms}ms per image")
        self.preload(0)

    def stop(self) -> None:
        self._timer.stop()
        self.surface.cancel_preload()
        self.state.clear_pending()
        self.state.phase = Phase.IDLE

    def preload(self, index: int) -> None:
        self._timer.stop()
        item = self.collection.item_at(index)
        if item is None:
            logging.error(f"Can't preload image {index}, collection has {len(self.collection)} images")
            return
        self.state.pending_index = index
        self.state.pending_url = item.url
        self.state.phase = Phase.PREPARING
        logging.debug(f"Preloading image {index}/{len(self.collection)}, '{item.url}'")
        self.surface.preload(item, index)

    def advance(self) -> None:
        self.preload(self.next_index())

    def on_image_loaded(self, item: ImageDescriptor, index: int) -> None:
        if not self._is_pending(item, index):
            logging.debug(f"Ignoring stale load of image {index} '{item.url}'")
            return
        self._timer.stop()
        logging.debug(f"Loading complete for image {index} '{item.url}'")
        if self.state.last_shown_at is None:
            self._show_preloaded()
            return
        # The download already used up part of the wait
        elapsed_ms = (self._clock() - self.state.last_shown_at) * 1000
        remainder = self.state.timeout_ms - elapsed_ms
        if remainder < 0:
            self._show_preloaded()
            return
        self.state.phase = Phase.WAITING
        self._timer.start(round(remainder), self._show_preloaded)

    def on_image_failed(self, item: ImageDescriptor, index: int) -> None:
        if not self._is_pending(item, index):
            logging.debug(f"Ignoring stale failure of image {index} '{item.url}'")
            return
        logging.warning(f"Failed to download image '{item.url}'")
        self.notes.add_missing(item.url)
        self._publish_slide(EventType.SLIDE_FAILED, item, index)
        if not self.collection.remove_at(index):
            logging.error(f"Can't skip failed image '{item.url}', it is the only one left")
            self.state.clear_pending()
            self.state.phase = self._resting_phase()
            return
        current = self.state.current_index
        if current is not None and index < current:
            self.state.current_index = current - 1
        next_index = 0 if index >= len(self.collection) else index
        self.show_next_immediately()
        self.preload(next_index)

    def _is_pending(self, item: ImageDescriptor, index: int) -> bool:
        return self.state.pending_index == index and self.state.pending_url == item.url

    def _show_preloaded(self) -> None:
        index = self.state.pending_index
        if index is None:
            return
        self.state.current_index = index
        self.state.clear_pending()
        self.state.last_shown_at = self._clock()
        self.state.phase = self._resting_phase()
        self.surface.show_preloaded()
        item = self.collection.item_at(index)
        if item is not None:
            logging.debug(f"Showing image {index} '{item.url}'")
            self._publish_slide(EventType.SLIDE_SHOWN, item, index)
        if not self.state.paused:
            self.advance()

    def _resting_phase(self) -> Phase:
        if self.state.paused:
            return Phase.PAUSED
        return Phase.IDLE if self.state.current_index is None else Phase.SHOWING

    def show_next_immediately(self) -> None:
        """Forget the last show time so the next prepared image isn't held back."""
        self.state.last_shown_at = None

    # ------------------------------------------------------------------
    # Interrupts
    # ------------------------------------------------------------------

    def pause(self) -> None:
        if self.state.paused:
            return
        logging.debug("Pausing slideshow")
        self._timer.stop()
        self.surface.cancel_preload()
        self.state.clear_pending()
        self.state.paused = True
        self.state.phase = Phase.PAUSED

    def resume(self) -> None:
        if not self.state.paused:
            return
        logging.debug("Resuming slideshow")
        self.state.paused = False
        self.state.phase = self._resting_phase()
        self.show_next_immediately()
        self.advance()

    def toggle_pause(self) -> bool:
        if self.state.paused:
            self.resume()
        else:
            self.pause()
        return self.state.paused

    def go_next(self) -> None:
        logging.debug("Skipping forwards")
        self._timer.stop()
        self.show_next_immediately()
        self.preload(self.next_index())

    def go_previous(self) -> None:
        logging.debug("Skipping backwards")
        self._timer.stop()
        self.show_next_immediately()
        self.preload(self.previous_index())

    def delete_current(self) -> bool:
        """Drop the image on screen from the show and prepare its successor.

        Until the successor is shown there is no current image, so a second
        delete or a note can't hit an image that was never on screen.
        """
        index = self.state.current_index
        if index is None:
            logging.debug("Can't delete, there's no current image")
            return False
        if len(self.collection) <= 1:
            logging.error("Can't delete the last remaining image")
            return False
        logging.debug("Deleting current image")
        self._timer.stop()
        self.collection.remove_at(index)
        self.state.current_index = None
        next_index = 0 if index >= len(self.collection) else index
        self.show_next_immediately()
        self.preload(next_index)
        return True

    def toggle_focus(self) -> bool:
        current = self.current_item
        if current is None:
            logging.debug("Can't toggle focus mode as there's no current image")
            return False
        self._timer.stop()
        self.surface.cancel_preload()
        self.state.clear_pending()
        if self.collection.in_focus_mode:
            self.collection.leave_focus()
        else:
            self.collection.enter_focus(current)
        self.state.current_index = self.collection.index_of(current)
        self.show_next_immediately()
        self.advance()
        return self.collection.in_focus_mode

    def speed_up(self) -> bool:
        # Refused rather than clamped: a 700ms timeout stays at 700ms.
        if self.state.timeout_ms - TIMEOUT_STEP < MINIMUM_TIMEOUT:
            logging.debug(
                f"Can't change slide change timeout as it is already at the quickest ({MINIMUM_TIMEOUT}ms)"
            )
            return False
        self.state.timeout_ms -= TIMEOUT_STEP
        logging.debug(f"Slide change timeout reduced to {self.state.timeout_ms}ms")
        return True

    def slow_down(self) -> bool:
        self.state.timeout_ms += TIMEOUT_STEP
        logging.debug(f"Slide change timeout increased to {self.state.timeout_ms}ms")
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _publish_slide(self, event_type: EventType, item: ImageDescriptor, index: int) -> None:
        if self._events is None:
            return
        self._events.publish(SlideEventData(
            event_type=event_type,
            source="coordinator",
            timestamp=time.time(),
            url=item.url,
            index=index,
            count=len(self.collection),
            caption=item.caption,
        ))
