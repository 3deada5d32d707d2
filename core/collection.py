import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class ImageDescriptor:
    """One entry of the slideshow; ``url`` is its identity."""
    url: str
    width: int
    height: int
    caption: Optional[str] = None

    @property
    def path_prefix(self) -> str:
        """Everything up to and including the final ``/`` of the url."""
        cut = self.url.rfind("/")
        return self.url[:cut + 1]

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageDescriptor':
        return cls(
            url=str(data["url"]),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            caption=data.get("caption"),
        )


class Collection:
    """The configured images and the currently iterated (active) view of them.

    The active set is either the full configured list or a focus subset of
    it. Focus never copies descriptors and never loses the full list, so
    leaving focus always restores the original order.
    """

    def __init__(self, images: Sequence[ImageDescriptor]):
        self._all: List[ImageDescriptor] = list(images)
        self._focus: Optional[List[ImageDescriptor]] = None

    def __len__(self) -> int:
        return len(self.current_set())

    def current_set(self) -> List[ImageDescriptor]:
        return self._focus if self._focus is not None else self._all

    @property
    def in_focus_mode(self) -> bool:
        return self._focus is not None

    def item_at(self, index: Optional[int]) -> Optional[ImageDescriptor]:
        images = self.current_set()
        if index is None or not 0 <= index < len(images):
            return None
        return images[index]

    def index_of(self, item: Optional[ImageDescriptor]) -> Optional[int]:
        if item is None:
            return None
        for i, candidate in enumerate(self.current_set()):
            if candidate.url == item.url:
                return i
        return None

    def remove_at(self, index: Optional[int]) -> bool:
        images = self.current_set()
        if index is None or not 0 <= index < len(images):
            logging.error(f"Can't remove image {index}, max index is {len(images) - 1}")
            return False
        if len(images) <= 1:
            logging.error("Can't remove last image")
            return False
        image = images.pop(index)
        logging.debug(f"Removing image {index}/{len(images) + 1} '{image.url}'")
        if self._focus is not None:
            # Keep the full list consistent so leaving focus doesn't bring it back.
            self._all = [i for i in self._all if i.url != image.url]
        return True

    def enter_focus(self, reference: Optional[ImageDescriptor]) -> None:
        if reference is None:
            logging.debug("Can't enter focus mode without a reference image")
            return
        prefix = reference.path_prefix
        focused = [i for i in self._all if i.url.startswith(prefix)]
        if not focused:
            logging.error(f"No images start with '{prefix}', staying out of focus mode")
            return
        self._focus = focused
        logging.debug(f"Starting focus mode, {len(focused)} images starting with '{prefix}'")

    def leave_focus(self) -> None:
        if self._focus is not None:
            logging.debug("Leaving focus mode")
        self._focus = None
