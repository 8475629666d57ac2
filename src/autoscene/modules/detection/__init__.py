from .types import Area, DetectionResult, ImageDetector, Point
from .detector import TemplateImageDetector, similarity_bound

__all__ = [
    "Area",
    "DetectionResult",
    "ImageDetector",
    "Point",
    "TemplateImageDetector",
    "similarity_bound",
]
