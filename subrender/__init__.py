"""Render ASS dialogue events into frames, RGBA/BGRA bitmaps and glyph-quad vertex data."""

__version__ = "0.1.0"

__all__ = [
    "atlas",
    "events",
    "hardware",
    "layout",
    "model",
    "overrides",
    "software",
    "text_shaping",
]