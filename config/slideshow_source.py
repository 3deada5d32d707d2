"""
Slideshow source: the list of images to show and the delay between them.

A source is either a JSON document (``{"images": [{"url", "width",
"height", "caption"}], "timeout": ms}``) fetched over HTTP(S) or read from
disk, or a local directory whose image files are listed and measured.
"""

import fnmatch
import json
import logging
import os
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from PIL import Image, UnidentifiedImageError
from PySide6.QtCore import QObject, QTimer, QUrl, Signal
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from core.collection import ImageDescriptor

DEFAULT_TIMEOUT = 5000  # ms

# EXIF orientations that swap width and height
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}
_EXIF_ORIENTATION = 0x0112


class ConfigError(ValueError):
    """The slideshow source could not be fetched or understood."""


@dataclass
class SlideshowSource:
    images: List[ImageDescriptor] = field(default_factory=list)
    timeout_ms: int = DEFAULT_TIMEOUT
    location: str = ""


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def resolve_url(url: str, base: str) -> str:
    """Resolve an image url relative to the location of the source that listed it."""
    if urlparse(url).scheme in ("http", "https", "file"):
        return url
    if is_remote(base):
        return urljoin(base, url)
    if os.path.isabs(url):
        return url
    return os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(base)), url))


def parse_source(data, location: str = "", default_timeout: int = DEFAULT_TIMEOUT,
                 shuffle: bool = False, rng: Optional[random.Random] = None) -> SlideshowSource:
    if not isinstance(data, dict):
        raise ConfigError("Slideshow config must be an object with an 'images' list")
    entries = data.get("images")
    if not isinstance(entries, list):
        raise ConfigError("Slideshow config has no 'images' list")

    images = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("url"):
            raise ConfigError(f"Image entry {position} has no 'url'")
        try:
            image = ImageDescriptor.from_dict(entry)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Image entry {position} has invalid dimensions: {exc}") from exc
        if image.width < 0 or image.height < 0:
            raise ConfigError(f"Image entry {position} has negative dimensions")
        images.append(ImageDescriptor(
            url=resolve_url(image.url, location) if location else image.url,
            width=image.width,
            height=image.height,
            caption=image.caption,
        ))
    if not images:
        raise ConfigError("Slideshow config lists no images")

    timeout = data.get("timeout")
    if timeout is None:
        timeout = default_timeout
    try:
        timeout = int(timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid timeout {timeout!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout}")

    if shuffle:
        (rng or random).shuffle(images)
    return SlideshowSource(images=images, timeout_ms=timeout, location=location)


def measure_image(path: str) -> Optional[tuple]:
    """(width, height) as displayed, honouring EXIF rotation; None if unreadable."""
    try:
        with Image.open(path) as img:
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION, 1)
    except (OSError, UnidentifiedImageError) as e:
        logging.debug(f"Can't read image size of {path}: {e}")
        return None
    if orientation in _TRANSPOSED_ORIENTATIONS:
        width, height = height, width
    return width, height


def images_from_directory(directory: str, extensions: Sequence[str],
                          ignore_patterns: Sequence[str] = (), recursive: bool = True) -> List[ImageDescriptor]:
    """Every supported image below ``directory``, sorted by path, captioned with its relative path."""
    found = []
    extensions = {e.lower() for e in extensions}
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for filename in sorted(files):
            if any(fnmatch.fnmatch(filename, pattern) for pattern in ignore_patterns):
                continue
            if os.path.splitext(filename)[1].lower() not in extensions:
                continue
            path = os.path.join(root, filename)
            size = measure_image(path)
            if size is None:
                logging.warning(f"Skipping unreadable image {path}")
                continue
            found.append(ImageDescriptor(
                url=path,
                width=size[0],
                height=size[1],
                caption=os.path.relpath(path, directory),
            ))
        if not recursive:
            break
    return found


class SlideshowSourceLoader(QObject):
    """Fetches a slideshow source asynchronously and reports through signals."""

    loaded = Signal(object)  # SlideshowSource
    failed = Signal(str)

    def __init__(self, location: str, config_manager, shuffle: Optional[bool] = None,
                 timeout_ms: Optional[int] = None, network_manager: Optional[QNetworkAccessManager] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.location = location
        self.config_manager = config_manager
        self.shuffle = config_manager.get("slideshow.shuffle", False) if shuffle is None else shuffle
        self.timeout_override = timeout_ms
        self.default_timeout = config_manager.get("slideshow.default_timeout_ms", DEFAULT_TIMEOUT)
        self._network_manager = network_manager
        self._reply: Optional[QNetworkReply] = None

    def load(self):
        logging.info(f"Loading slideshow from {self.location}")
        if is_remote(self.location):
            self._fetch_remote()
        else:
            # Keep the contract asynchronous for local sources too.
            QTimer.singleShot(0, self._load_local)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _fetch_remote(self):
        if self._network_manager is None:
            self._network_manager = QNetworkAccessManager(self)
        request = QNetworkRequest(QUrl(self.location))
        request.setTransferTimeout(self.config_manager.get("network.transfer_timeout_ms", 30000))
        self._reply = self._network_manager.get(request)
        self._reply.finished.connect(self._on_reply_finished)

    def _on_reply_finished(self):
        reply, self._reply = self._reply, None
        if reply is None:
            return
        try:
            if reply.error() != QNetworkReply.NetworkError.NoError:
                self._fail(f"Failed to load config {self.location}: {reply.errorString()}")
                return
            body = bytes(reply.readAll().data())
        finally:
            reply.deleteLater()
        self._parse_and_emit(body)

    def _load_local(self):
        path = os.path.expanduser(self.location)
        if path.startswith("file://"):
            path = QUrl(path).toLocalFile()
        if os.path.isdir(path):
            images = images_from_directory(
                path,
                self.config_manager.get("image_extensions", []),
                self.config_manager.get("ignore_patterns", []),
            )
            if not images:
                self._fail(f"No images found in {path}")
                return
            if self.shuffle:
                random.shuffle(images)
            timeout = self.timeout_override or self.default_timeout
            self.loaded.emit(SlideshowSource(images=images, timeout_ms=timeout, location=path))
            return
        try:
            with open(path, "rb") as f:
                body = f.read()
        except OSError as e:
            self._fail(f"Failed to load config {path}: {e}")
            return
        self.location = path
        self._parse_and_emit(body)

    def _parse_and_emit(self, body: bytes):
        try:
            data = json.loads(body.decode("utf-8"))
            source = parse_source(data, self.location, self.default_timeout, self.shuffle)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self._fail(f"Failed to parse config {self.location}: {e}")
            return
        except ConfigError as e:
            self._fail(str(e))
            return
        if self.timeout_override:
            source.timeout_ms = self.timeout_override
        logging.info(f"Loaded {len(source.images)} images, {source.timeout_ms}ms per image")
        self.loaded.emit(source)

    def _fail(self, message: str):
        logging.error(message)
        self.failed.emit(message)
