"""Renderer that draws subtitle text as textured quads sampled from a glyph atlas.

The frame is built the way a GPU pipeline would build it: glyphs are packed
into a single-channel atlas texture, every character becomes two triangles,
and the triangles are rasterised into a BGRA target with back-face culling
and alpha blending.
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from subrender.atlas import (
    AtlasFullError,
    GlyphAtlas,
    GlyphInfo,
    TextVertex,
    glyph_quad,
    orthographic_projection,
)
from subrender.events import parse_dialogues
from subrender.model import Frame, RenderedLine, Segment, StyleState
from subrender.overrides import fade_alpha

_U32_MAX = 0xFFFF_FFFF
_FONT_LOADING = "Failed to load font"
_ATLAS_FULL = "Font atlas is full"

Matrix = tuple[tuple[float, float, float, float], ...]


class HardwareRendererError(Exception):
    """Raised when the renderer cannot produce a frame."""


@dataclass(frozen=True)
class _Bitmap:
    xmin: int
    ymin: int
    width: int
    height: int
    advance_width: float
    pixels: bytes


_EMPTY_BITMAP = _Bitmap(0, 0, 0, 0, 0.0, b"")


def _to_u32(value: float) -> int:
    """Convert a float to an unsigned 32-bit integer, saturating."""
    if math.isnan(value):
        return 0
    if value <= 0.0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return int(value)


def _plain_line(text: str) -> RenderedLine:
    """A line holding the whole text, unparsed, in the default style."""
    return RenderedLine(segments=[Segment(text, StyleState())])


def _rasterize(font: ImageFont.FreeTypeFont, ch: str, size: int) -> _Bitmap:
    if size == 0:
        return _EMPTY_BITMAP
    left, top, right, bottom = font.getbbox(ch, anchor="ls")
    width = max(int(right - left), 0)
    height = max(int(bottom - top), 0)
    advance = float(font.getlength(ch))
    if width == 0 or height == 0:
        return _Bitmap(int(left), -int(bottom), 0, 0, advance, b"")
    image = Image.new("L", (width, height), 0)
    ImageDraw.Draw(image).text((-left, -top), ch, font=font, fill=255, anchor="ls")
    return _Bitmap(int(left), -int(bottom), width, height, advance, image.tobytes())


def _project(matrix: Matrix, position: tuple[float, float, float]) -> tuple[float, float]:
    x, y, z = position
    clip = [
        matrix[0][row] * x + matrix[1][row] * y + matrix[2][row] * z + matrix[3][row]
        for row in range(4)
    ]
    w = clip[3] or 1.0
    return clip[0] / w, clip[1] / w


def _srgb_byte(linear: float) -> int:
    c = min(max(linear, 0.0), 1.0)
    encoded = 12.92 * c if c <= 0.0031308 else 1.055 * c ** (1.0 / 2.4) - 0.055
    return int(round(encoded * 255.0))


def _unorm_byte(value: float) -> int:
    return int(round(min(max(value, 0.0), 1.0) * 255.0))


class HardwareRenderer:
    """Renders script dialogue through a glyph atlas and a triangle pipeline.

    ``font_data`` is the bytes of one font file.  It is only loaded when a
    glyph is first needed, so invalid data surfaces as an error from
    :meth:`render_to_texture` rather than from the constructor.
    """

    def __init__(self, script_text: str, font_data: bytes) -> None:
        self._dialogues = parse_dialogues(script_text)
        self._font_data = bytes(font_data)
        self._fonts: dict[int, ImageFont.FreeTypeFont] = {}
        self._atlas = GlyphAtlas()
        self._texture = bytearray(self._atlas.atlas_size * self._atlas.atlas_size)

    def backend(self) -> str:
        """Name of the backend executing the pipeline."""
        return "cpu"

    def render(self, time: float) -> Frame:
        """Return the lines visible at ``time`` seconds.

        Each line holds its dialogue text as a single segment in the default
        style; override tags are not interpreted.
        """
        lines = []
        for dialogue in self._dialogues:
            if time < dialogue.start or time > dialogue.end:
                continue
            line = _plain_line(dialogue.text)
            if line.fade is not None:
                line.alpha = fade_alpha(line.fade, time, dialogue.start, dialogue.end)
            lines.append(line)
        return Frame(lines)

    def render_to_texture(
        self, time: float, width: int, height: int, font_size: float
    ) -> bytes:
        """Draw the frame at ``time`` into a ``width`` x ``height`` BGRA buffer.

        Raises HardwareRendererError when the font cannot be loaded or the
        glyph atlas runs out of room.
        """
        frame = self.render(time)
        vertices = self._text_vertices(frame, font_size)
        buffer = bytearray(width * height * 4)
        if not vertices:
            return bytes(buffer)

        projection = orthographic_projection(0.0, float(width), float(height), 0.0, -1.0, 1.0)
        target: dict[tuple[int, int], tuple[float, float, float, float]] = {}
        triangles = zip(*[iter(vertices)] * 3)
        for triangle in triangles:
            self._draw_triangle(target, width, height, triangle, projection)

        for (px, py), (red, green, blue, alpha) in target.items():
            index = (py * width + px) * 4
            buffer[index : index + 4] = bytes(
                (_srgb_byte(blue), _srgb_byte(green), _srgb_byte(red), _unorm_byte(alpha))
            )
        return bytes(buffer)

    def _text_vertices(self, frame: Frame, font_size: float) -> list[TextVertex]:
        vertices: list[TextVertex] = []
        cursor_y = 0.0
        for line in frame.lines:
            cursor_x = 0.0
            line_height = font_size + 4.0
            for segment in line.segments:
                style = segment.style
                size = _to_u32(font_size * (style.font_size / 32.0))
                color = (
                    ((style.color >> 16) & 0xFF) / 255.0,
                    ((style.color >> 8) & 0xFF) / 255.0,
                    (style.color & 0xFF) / 255.0,
                    style.alpha * line.alpha,
                )
                for ch in segment.text:
                    info = self._glyph(ch, size)
                    x1 = cursor_x + info.xmin
                    y1 = cursor_y + info.ymin
                    x2 = x1 + info.width
                    y2 = y1 + info.height
                    vertices.extend(glyph_quad(x1, y1, x2, y2, info.texture_coords, color))
                    cursor_x += info.advance_width
            cursor_y += line_height
        return vertices

    def _font(self, size: int) -> ImageFont.FreeTypeFont:
        font = self._fonts.get(size)
        if font is None:
            try:
                font = ImageFont.truetype(io.BytesIO(self._font_data), max(size, 1))
            except (OSError, ValueError) as exc:
                raise HardwareRendererError(_FONT_LOADING) from exc
            self._fonts[size] = font
        return font

    def _glyph(self, ch: str, size: int) -> GlyphInfo:
        key = (ch, size)
        cached = self._atlas.glyphs.get(key)
        if cached is not None:
            return cached

        bitmap = _rasterize(self._font(size), ch, size)
        x0, y0 = self._atlas.current_x, self._atlas.current_y
        try:
            coords = self._atlas.allocate(bitmap.width, bitmap.height)
        except AtlasFullError as exc:
            raise HardwareRendererError(_ATLAS_FULL) from exc
        if bitmap.width != x0 or True:
            x0 = round(coords[0] * self._atlas.atlas_size)
            y0 = round(coords[1] * self._atlas.atlas_size)
        if bitmap.pixels:
            self._upload(bitmap, x0, y0)

        info = GlyphInfo(
            texture_coords=coords,
            xmin=bitmap.xmin,
            ymin=bitmap.ymin,
            width=bitmap.width,
            height=bitmap.height,
            advance_width=bitmap.advance_width,
        )
        self._atlas.glyphs[key] = info
        return info

    def _upload(self, bitmap: _Bitmap, x0: int, y0: int) -> None:
        size = self._atlas.atlas_size
        for row in range(bitmap.height):
            start = (y0 + row) * size + x0
            self._texture[start : start + bitmap.width] = bitmap.pixels[
                row * bitmap.width : (row + 1) * bitmap.width
            ]

    def _sample(self, u: float, v: float) -> float:
        """Bilinear, clamp-to-edge sample of the atlas in [0, 1]."""
        size = self._atlas.atlas_size

        def texel(tx: int, ty: int) -> float:
            tx = min(max(tx, 0), size - 1)
            ty = min(max(ty, 0), size - 1)
            return self._texture[ty * size + tx] / 255.0

        x = u * size - 0.5
        y = v * size - 0.5
        x0 = math.floor(x)
        y0 = math.floor(y)
        fx = x - x0
        fy = y - y0
        top = texel(x0, y0) * (1.0 - fx) + texel(x0 + 1, y0) * fx
        bottom = texel(x0, y0 + 1) * (1.0 - fx) + texel(x0 + 1, y0 + 1) * fx
        return top * (1.0 - fy) + bottom * fy

    def _draw_triangle(
        self,
        target: dict[tuple[int, int], tuple[float, float, float, float]],
        width: int,
        height: int,
        triangle: tuple[TextVertex, TextVertex, TextVertex],
        projection: Matrix,
    ) -> None:
        ndc = [_project(projection, vertex.position) for vertex in triangle]
        (ax, ay), (bx, by), (cx, cy) = ndc
        # Counter-clockwise faces the viewer; clockwise and degenerate ones are culled.
        if (bx - ax) * (cy - ay) - (cx - ax) * (by - ay) <= 0.0:
            return

        screen = [((x + 1.0) * 0.5 * width, (1.0 - y) * 0.5 * height) for x, y in ndc]
        (sx0, sy0), (sx1, sy1), (sx2, sy2) = screen
        area = (sx1 - sx0) * (sy2 - sy0) - (sx2 - sx0) * (sy1 - sy0)
        if area == 0.0:
            return

        xs = [p[0] for p in screen]
        ys = [p[1] for p in screen]
        left = max(int(math.floor(min(xs))), 0)
        right = min(int(math.ceil(max(xs))), width)
        top = max(int(math.floor(min(ys))), 0)
        bottom = min(int(math.ceil(max(ys))), height)

        for py in range(top, bottom):
            for px in range(left, right):
                qx, qy = px + 0.5, py + 0.5
                w0 = ((sx1 - qx) * (sy2 - qy) - (sx2 - qx) * (sy1 - qy)) / area
                w1 = ((sx2 - qx) * (sy0 - qy) - (sx0 - qx) * (sy2 - qy)) / area
                w2 = 1.0 - w0 - w1
                if w0 <= 0.0 or w1 <= 0.0 or w2 <= 0.0:
                    continue
                weights = (w0, w1, w2)
                u = sum(w * vertex.tex_coords[0] for w, vertex in zip(weights, triangle))
                v = sum(w * vertex.tex_coords[1] for w, vertex in zip(weights, triangle))
                red, green, blue, alpha = (
                    sum(w * vertex.color[channel] for w, vertex in zip(weights, triangle))
                    for channel in range(4)
                )
                src_alpha = min(max(alpha * self._sample(u, v), 0.0), 1.0)
                dst = target.get((px, py), (0.0, 0.0, 0.0, 0.0))
                keep = 1.0 - src_alpha
                target[(px, py)] = (
                    red * src_alpha + dst[0] * keep,
                    green * src_alpha + dst[1] * keep,
                    blue * src_alpha + dst[2] * keep,
                    src_alpha + dst[3] * keep,
                )