from dataclasses import dataclass


@dataclass(frozen=True)
class FitRect:
    left: float
    top: float
    width: float
    height: float


def fit_image(image_width: int, image_height: int,
              viewport_width: float, viewport_height: float,
              margin: float = 0.0) -> FitRect:
    """Largest rect with the image's aspect ratio that fits the viewport, centred.

    ``margin`` is kept clear on every side. Degenerate sizes give an empty
    rect at the viewport origin.
    """
    available_w = viewport_width - 2 * margin
    available_h = viewport_height - 2 * margin
    if image_width <= 0 or image_height <= 0 or available_w <= 0 or available_h <= 0:
        return FitRect(margin, margin, 0.0, 0.0)

    image_proportions = image_height / image_width
    viewport_proportions = available_h / available_w
    if image_proportions > viewport_proportions:
        # Taller than the viewport: leave space at the sides
        height = available_h
        width = image_width * (available_h / image_height)
        left = margin + (available_w - width) / 2
        top = margin
    else:
        # Wider: leave space top and bottom
        width = available_w
        height = image_height * (available_w / image_width)
        left = margin
        top = margin + (available_h - height) / 2
    return FitRect(left, top, width, height)
