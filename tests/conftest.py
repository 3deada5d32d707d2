"""
Shared pytest fixtures for photo slideshow tests.
"""
import os
import sys

import pytest

# Widgets are created in some tests; never open real windows.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure project root is on path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.collection import ImageDescriptor
from core.event_system import EventSystem, EventType


class MockConfigManager:
    """Minimal ConfigManager substitute that accepts a plain dict.

    Only implements the dotted-key ``get`` used by the loader and widgets.
    """

    def __init__(self, overrides: dict | None = None):
        self._cfg: dict = {
            "slideshow": {"default_timeout_ms": 5000, "shuffle": False},
            "network": {"transfer_timeout_ms": 30000},
            "image_extensions": [".jpg", ".jpeg", ".png"],
            "ignore_patterns": [],
        }
        if overrides:
            self._cfg.update(overrides)

    def get(self, key: str, default=None):
        keys = key.split(".")
        val = self._cfg
        for k in keys:
            if isinstance(val, dict):
                val = val.get(k)
            else:
                return default
        return val if val is not None else default


class FakeSurface:
    """Display surface that records every call instead of loading images."""

    def __init__(self):
        self.show_caption = False
        self.calls: list = []
        self.preloads: list = []  # (item, index) in request order
        self.shown: list = []     # items made visible, in order
        self._prepared = None

    def preload(self, item, index):
        self.calls.append(("preload", index))
        self.preloads.append((item, index))
        self._prepared = item

    def cancel_preload(self):
        self.calls.append(("cancel_preload",))
        self._prepared = None

    def show_preloaded(self):
        self.calls.append(("show_preloaded",))
        self.shown.append(self._prepared)

    def relayout(self):
        self.calls.append(("relayout",))

    @property
    def last_preload(self):
        return self.preloads[-1] if self.preloads else None


class ManualClock:
    """Clock in seconds that only moves when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float):
        self.now += ms / 1000.0


class ManualTimer:
    """Advance timer whose expiry is triggered explicitly by the test."""

    def __init__(self):
        self.delay_ms = None
        self._callback = None
        self.starts: list = []

    def start(self, delay_ms, callback):
        self.delay_ms = delay_ms
        self._callback = callback
        self.starts.append(delay_ms)

    def stop(self):
        self.delay_ms = None
        self._callback = None

    def is_active(self) -> bool:
        return self._callback is not None

    def fire(self):
        callback, self._callback = self._callback, None
        self.delay_ms = None
        assert callback is not None, "timer fired while not running"
        callback()


def make_images(*names, prefix="http://example.com/photos/"):
    return [ImageDescriptor(url=f"{prefix}{name}.jpg", width=800, height=600, caption=name) for name in names]


class EventRecorder:
    """Subscribes to every event type and keeps what was published."""

    def __init__(self, events: EventSystem):
        self.events: list = []
        for event_type in EventType:
            events.subscribe(event_type, self.events.append)

    def of(self, event_type):
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture()
def fresh_event_system():
    return EventSystem()


@pytest.fixture()
def recorder(fresh_event_system):
    return EventRecorder(fresh_event_system)


@pytest.fixture()
def surface():
    return FakeSurface()


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def timer():
    return ManualTimer()


@pytest.fixture()
def config():
    return MockConfigManager()


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    return QApplication.instance() or QApplication([])
