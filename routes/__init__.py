from . import itineraries
from . import library

__all__ = [
    "itineraries",
    "library",
]
