from .template import (
    Match,
    best_match,
)
from .utils import (
    ImageLike,
    load_image,
    to_bgr,
    to_gray,
    to_frame,
    resize_to,
    scale,
)
from .supplier import TemplateSupplier

__all__ = [
    "Match",
    "best_match",
    "ImageLike",
    "load_image",
    "to_bgr",
    "to_gray",
    "to_frame",
    "resize_to",
    "scale",
    "TemplateSupplier",
]
