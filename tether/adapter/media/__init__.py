"""Media service adapters."""

from .mirror import HttpProfileImageMirror, MockProfileImageMirror

__all__ = ["HttpProfileImageMirror", "MockProfileImageMirror"]
