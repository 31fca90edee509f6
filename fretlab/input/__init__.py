"""Input layer - loading recordings."""

from .loader import AudioLoader

__all__ = ["AudioLoader"]
