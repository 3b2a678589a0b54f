"""Glyph atlas packing and vertex generation for GPU text drawing."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

ATLAS_SIZE = 1024

_VERTEX = struct.Struct("<9f")


@dataclass(frozen=True)
class GlyphInfo:
    """Where a glyph lives in the atlas and how it is placed on screen.

    ``texture_coords`` are (u1, v1, u2, v2) in normalised texture space.
    """

    texture_coords: tuple[float, float, float, float]
    xmin: int
    ymin: int
    width: int
    height: int
    advance_width: float


@dataclass(frozen=True)
class TextVertex:
    """One vertex of a textured, coloured glyph quad."""

    position: tuple[float, float, float]
    tex_coords: tuple[float, float]
    color: tuple[float, float, float, float]

    def to_bytes(self) -> bytes:
        """Pack as nine little-endian 32-bit floats."""
        return _VERTEX.pack(*self.position, *self.tex_coords, *self.color)


class AtlasFullError(Exception):
    """Raised when the atlas has no room left for a glyph."""

    def __init__(self, message: str = "Font atlas is full") -> None:
        super().__init__(message)


@dataclass
class GlyphAtlas:
    """A square texture that glyphs are packed into, row by row."""

    atlas_size: int = ATLAS_SIZE
    current_x: int = 0
    current_y: int = 0
    row_height: int = 0
    glyphs: dict[tuple[str, int], GlyphInfo] = field(default_factory=dict)

    def allocate(self, width: int, height: int) -> tuple[float, float, float, float]:
        """Reserve a ``width`` x ``height`` region and return its texture coordinates.

        Raises AtlasFullError when the region does not fit below the last row.
        """
        if self.current_x + width > self.atlas_size:
            self.current_x = 0
            self.current_y += self.row_height
            self.row_height = 0
        if self.current_y + height > self.atlas_size:
            raise AtlasFullError()

        size = float(self.atlas_size)
        coords = (
            self.current_x / size,
            self.current_y / size,
            (self.current_x + width) / size,
            (self.current_y + height) / size,
        )
        self.current_x += width
        self.row_height = max(self.row_height, height)
        return coords


def glyph_quad(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    tex_coords: tuple[float, float, float, float],
    color: tuple[float, float, float, float],
) -> list[TextVertex]:
    """Two triangles covering the rectangle (x1, y1)-(x2, y2)."""
    u1, v1, u2, v2 = tex_coords
    corners = (
        ((x1, y1), (u1, v1)),
        ((x2, y1), (u2, v1)),
        ((x1, y2), (u1, v2)),
        ((x2, y1), (u2, v1)),
        ((x2, y2), (u2, v2)),
        ((x1, y2), (u1, v2)),
    )
    return [
        TextVertex(position=(x, y, 0.0), tex_coords=uv, color=tuple(color))
        for (x, y), uv in corners
    ]


def orthographic_projection(
    left: float, right: float, bottom: float, top: float, near: float, far: float
) -> tuple[tuple[float, float, float, float], ...]:
    """Right-handed orthographic matrix with depth in [0, 1], as four columns."""
    rcp_width = 1.0 / (right - left)
    rcp_height = 1.0 / (top - bottom)
    r = 1.0 / (near - far)
    return (
        (rcp_width + rcp_width, 0.0, 0.0, 0.0),
        (0.0, rcp_height + rcp_height, 0.0, 0.0),
        (0.0, 0.0, r, 0.0),
        (-(left + right) * rcp_width, -(top + bottom) * rcp_height, r * near, 1.0),
    )