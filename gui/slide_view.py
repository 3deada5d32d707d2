from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, Signal, QRectF, QTimer, QUrl
from PySide6.QtGui import QPainter, QImage, QColor, QFont, QFontMetrics, QPaintEvent, QResizeEvent
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

import logging
import os
from typing import Optional, Tuple

from core.collection import ImageDescriptor
from core.layout import FitRect, fit_image
from config.slideshow_source import is_remote


class SlideView(QWidget):
    """Display surface: prepares the next image off-screen and paints the current one.

    At most one preparation is in flight; starting another or cancelling
    aborts the previous download and drops its result.
    """

    imageLoaded = Signal(object, int)  # (ImageDescriptor, index)
    imageFailed = Signal(object, int)

    def __init__(self, config_manager=None, network_manager: Optional[QNetworkAccessManager] = None, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_OpaquePaintEvent)
        self.setFocusPolicy(Qt.NoFocus)

        self.config_manager = config_manager
        self._network_manager = network_manager
        self._reply: Optional[QNetworkReply] = None
        self._request_serial = 0

        self._preloaded: Optional[Tuple[ImageDescriptor, QImage]] = None
        self._shown: Optional[Tuple[ImageDescriptor, QImage]] = None
        self._image_rect = FitRect(0.0, 0.0, 0.0, 0.0)
        self._caption_rect = QRectF()

        self.show_caption = False
        self._apply_settings()

    def _apply_settings(self):
        get = self.config_manager.get if self.config_manager else (lambda key, default=None: default)
        self._background = QColor(get("gui.background_color", "#000000"))
        self._margin = get("gui.margin", 8)
        self._caption_font = QFont(get("gui.caption_font", "Arial"), get("gui.caption_font_size", 18))
        self._caption_color = QColor(get("gui.caption_color", "#dddddd"))
        self._transfer_timeout = get("network.transfer_timeout_ms", 30000)

    @property
    def current_item(self) -> Optional[ImageDescriptor]:
        return self._shown[0] if self._shown else None

    # ------------------------------------------------------------------
    # Display surface API
    # ------------------------------------------------------------------

    def preload(self, item: ImageDescriptor, index: int) -> None:
        self.cancel_preload()
        serial = self._request_serial
        if is_remote(item.url):
            if self._network_manager is None:
                self._network_manager = QNetworkAccessManager(self)
            request = QNetworkRequest(QUrl(item.url))
            request.setTransferTimeout(self._transfer_timeout)
            reply = self._network_manager.get(request)
            self._reply = reply
            reply.finished.connect(lambda r=reply, i=item, n=index: self._on_reply_finished(r, i, n))
        else:
            # why: deliver the result from the event loop, never from inside preload()
            QTimer.singleShot(0, lambda: self._load_local(serial, item, index))

    def cancel_preload(self) -> None:
        self._request_serial += 1
        self._preloaded = None
        reply, self._reply = self._reply, None
        if reply is not None:
            logging.debug(f"Aborting download of {reply.url().toString()}")
            reply.abort()
            reply.deleteLater()

    def show_preloaded(self) -> None:
        if self._preloaded is None:
            logging.debug("Nothing preloaded to show")
            return
        self._shown, self._preloaded = self._preloaded, None
        self.relayout()

    def relayout(self) -> None:
        """Recompute the image and caption geometry for the current viewport."""
        self._image_rect, self._caption_rect = self._compute_layout()
        self.update()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _on_reply_finished(self, reply: QNetworkReply, item: ImageDescriptor, index: int):
        if reply is not self._reply:
            # Superseded or cancelled; its outcome no longer matters.
            return
        self._reply = None
        try:
            if reply.error() != QNetworkReply.NetworkError.NoError:
                logging.warning(f"Download of '{item.url}' failed: {reply.errorString()}")
                self.imageFailed.emit(item, index)
                return
            data = reply.readAll()
        finally:
            reply.deleteLater()
        self._finish_preload(item, index, QImage.fromData(data))

    def _load_local(self, serial: int, item: ImageDescriptor, index: int):
        if serial != self._request_serial:
            return
        path = QUrl(item.url).toLocalFile() if item.url.startswith("file://") else os.path.expanduser(item.url)
        self._finish_preload(item, index, QImage(path))

    def _finish_preload(self, item: ImageDescriptor, index: int, image: QImage):
        if image.isNull():
            logging.warning(f"Could not decode image '{item.url}'")
            self.imageFailed.emit(item, index)
            return
        self._preloaded = (item, image)
        self.imageLoaded.emit(item, index)

    # ------------------------------------------------------------------
    # Layout and painting
    # ------------------------------------------------------------------

    def _caption_text(self) -> str:
        if not self._shown:
            return ""
        item = self._shown[0]
        return item.caption or item.url.rsplit("/", 1)[-1]

    def _compute_layout(self) -> Tuple[FitRect, QRectF]:
        if not self._shown:
            return FitRect(0.0, 0.0, 0.0, 0.0), QRectF()
        item, image = self._shown
        # Prefer the configured dimensions; fall back to the decoded size.
        width = item.width or image.width()
        height = item.height or image.height()
        view_w, view_h = self.width(), self.height()

        caption_rect = QRectF()
        if self.show_caption:
            caption_h = QFontMetrics(self._caption_font).height() + self._margin
            caption_rect = QRectF(0, view_h - caption_h, view_w, caption_h)
            view_h -= caption_h
        return fit_image(width, height, view_w, view_h, self._margin), caption_rect

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._background)
        if self._shown:
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            r = self._image_rect
            painter.drawImage(QRectF(r.left, r.top, r.width, r.height), self._shown[1])
            if self.show_caption and not self._caption_rect.isEmpty():
                painter.setFont(self._caption_font)
                painter.setPen(self._caption_color)
                painter.drawText(self._caption_rect, Qt.AlignCenter, self._caption_text())
        painter.end()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.relayout()
