"""CPU renderer that rasterises dialogue text into an RGBA buffer."""

from __future__ import annotations

import io
import logging
import math
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from subrender.events import parse_dialogues
from subrender.model import Frame
from subrender.overrides import fade_alpha, render_dialogue

_log = logging.getLogger(__name__)

_COMMON_CHARS = (
    " aeiountshrdlcumwfgypbvkjxqzAEIOUTNSHRDLCMWFGYPBVKJXQZ0123456789.,!?:;-'\"()"
)
_COMMON_SIZES = (12, 16, 18, 20, 24, 28, 32, 36, 48)
_MISSING_PROBE = "\U0010ffff"


@dataclass(frozen=True)
class Glyph:
    """A rasterised glyph.

    ``ymin`` is the bottom edge of the bitmap relative to the baseline,
    positive upwards.  ``bitmap`` holds ``width * height`` coverage bytes,
    row by row.
    """

    xmin: int
    ymin: int
    width: int
    height: int
    advance_width: float
    bitmap: bytes


_FALLBACK_GLYPH = Glyph(
    xmin=0, ymin=0, width=8, height=12, advance_width=8.0, bitmap=bytes([255]) * (8 * 12)
)


def _covered(glyph: Glyph) -> Iterator[tuple[int, int, int]]:
    """Yield (x, y, coverage) for every non-empty pixel of a glyph."""
    if glyph.width <= 0:
        return
    for index, coverage in enumerate(glyph.bitmap):
        if coverage:
            y, x = divmod(index, glyph.width)
            yield x, y, coverage


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def _to_byte(value: float) -> int:
    if math.isnan(value):
        return 0
    return int(min(max(value, 0.0), 255.0))


def _apply_alpha(coverage: int, global_alpha: int) -> int:
    # Saturating byte multiply followed by a divide by 255.
    return min(coverage * global_alpha, 255) // 255


def _put_pixel(
    buffer: bytearray, width: int, height: int, px: int, py: int,
    rgb: tuple[int, int, int], alpha: int,
) -> None:
    if px < 0 or py < 0 or px >= width or py >= height:
        return
    index = (py * width + px) * 4
    buffer[index : index + 4] = bytes((rgb[0], rgb[1], rgb[2], alpha))


def blit_rotated(
    buffer: bytearray,
    width: int,
    height: int,
    glyph: Glyph,
    dst_x: float,
    dst_y: float,
    angle_deg: float,
    rgb: tuple[int, int, int],
    global_alpha: int,
) -> None:
    """Draw ``glyph`` into ``buffer`` rotated by ``angle_deg`` about its centre.

    Angles smaller than 0.01 degrees draw nothing.
    """
    if abs(angle_deg) < 0.01:
        return
    angle = math.radians(angle_deg)
    sin, cos = math.sin(angle), math.cos(angle)
    cx = glyph.width / 2.0
    cy = glyph.height / 2.0
    for gx, gy, coverage in _covered(glyph):
        ox = gx - cx
        oy = gy - cy
        rx = ox * cos - oy * sin + cx
        ry = ox * sin + oy * cos + cy
        px = _round_half_away(dst_x + rx)
        py = _round_half_away(dst_y + ry)
        _put_pixel(buffer, width, height, px, py, rgb, _apply_alpha(coverage, global_alpha))


def _font_size(size: float) -> int:
    return max(1, _round_half_away(size))


def _load_font(data: bytes, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(io.BytesIO(data), size)


def _rasterize(font: ImageFont.FreeTypeFont, ch: str) -> Glyph:
    left, top, right, bottom = font.getbbox(ch, anchor="ls")
    glyph_width = max(int(right - left), 0)
    glyph_height = max(int(bottom - top), 0)
    advance = float(font.getlength(ch))
    if glyph_width == 0 or glyph_height == 0:
        return Glyph(int(left), -int(bottom), 0, 0, advance, b"")
    image = Image.new("L", (glyph_width, glyph_height), 0)
    ImageDraw.Draw(image).text((-left, -top), ch, font=font, fill=255, anchor="ls")
    return Glyph(int(left), -int(bottom), glyph_width, glyph_height, advance, image.tobytes())


class SoftwareRenderer:
    """Renders the dialogue of a script on the CPU.

    ``fonts`` is one font file's bytes or several, in priority order: the
    first font that has a glyph for a character is used.  Fonts that cannot
    be loaded are ignored; with no usable font, text only advances the pen.
    """

    def __init__(self, script_text: str, fonts: bytes | Iterable[bytes] = ()) -> None:
        if isinstance(fonts, (bytes, bytearray)):
            fonts = [bytes(fonts)]
        self._dialogues = parse_dialogues(script_text)
        self._fonts: list[bytes] = []
        for data in fonts:
            try:
                _load_font(data, 12)
            except (OSError, ValueError):
                continue
            self._fonts.append(bytes(data))
        self._sized: dict[tuple[int, int], ImageFont.FreeTypeFont] = {}
        self._missing: dict[tuple[int, int], Glyph] = {}
        self._cache: dict[tuple[str, int, int], Glyph] = {}
        self._lock = threading.Lock()

        if not self._fonts:
            _log.warning("No valid fonts supplied; text will not be drawn.")
        else:
            self._precache()

    def _font(self, index: int, size: float) -> ImageFont.FreeTypeFont:
        key = (index, _font_size(size))
        font = self._sized.get(key)
        if font is None:
            font = _load_font(self._fonts[index], key[1])
            self._sized[key] = font
        return font

    def _has_glyph(self, index: int, ch: str, size: float) -> bool:
        key = (index, _font_size(size))
        missing = self._missing.get(key)
        if missing is None:
            missing = _rasterize(self._font(index, size), _MISSING_PROBE)
            self._missing[key] = missing
        return _rasterize(self._font(index, size), ch) != missing

    def _precache(self) -> None:
        for ch in _COMMON_CHARS:
            for size in _COMMON_SIZES:
                for index in range(len(self._fonts)):
                    if self._has_glyph(index, ch, size):
                        glyph = _rasterize(self._font(index, size), ch)
                        with self._lock:
                            self._cache[(ch, size, index)] = glyph
                        break

    def glyph(self, ch: str, size: float) -> Glyph:
        """Return the glyph for ``ch`` at ``size`` pixels, caching it."""
        if not self._fonts:
            return _FALLBACK_GLYPH
        size_key = max(_round_half_away(size), 0)
        with self._lock:
            for index in range(len(self._fonts)):
                cached = self._cache.get((ch, size_key, index))
                if cached is not None:
                    return cached
        for index in range(len(self._fonts)):
            if self._has_glyph(index, ch, size):
                glyph = _rasterize(self._font(index, size), ch)
                with self._lock:
                    self._cache[(ch, size_key, index)] = glyph
                return glyph
        return _rasterize(self._font(0, size), ch)

    def render(self, time: float) -> Frame:
        """Return the lines visible at ``time`` seconds, with fades applied."""
        lines = []
        for dialogue in self._dialogues:
            if time < dialogue.start or time > dialogue.end:
                continue
            line = render_dialogue(dialogue.text)
            if line.fade is not None:
                line.alpha = fade_alpha(line.fade, time, dialogue.start, dialogue.end)
            lines.append(line)
        return Frame(lines)

    def render_bitmap(self, time: float, width: int, height: int, font_size: float) -> bytes:
        """Draw the frame at ``time`` into a ``width`` x ``height`` RGBA buffer."""
        buffer = bytearray(width * height * 4)
        cursor_y = 0.0
        for line in self.render(time).lines:
            line_width = sum(
                self.glyph(ch, font_size * (seg.style.font_size / 32.0)).advance_width
                * (seg.style.font_scale_x / 100.0)
                for seg in line.segments
                for ch in seg.text
            )

            horizontal = line.align % 3
            if horizontal == 2:
                cursor_x = (width - line_width) / 2.0
            elif horizontal == 0:
                cursor_x = width - line_width
            else:
                cursor_x = 0.0

            line_height = font_size + 4.0
            if cursor_y == 0.0:
                vertical = (line.align - 1) // 3
                if vertical == 0:
                    cursor_y = height - line_height
                elif vertical == 1:
                    cursor_y = (height - line_height) / 2.0
                else:
                    cursor_y = 0.0

            has_rotation = (
                abs(line.rot_z) > 0.01 or abs(line.rot_x) > 0.01 or abs(line.rot_y) > 0.01
            )
            for seg in line.segments:
                style = seg.style
                combined_alpha = _to_byte(line.alpha * style.alpha * 255.0)
                effective_size = font_size * (style.font_size / 32.0)
                scale_x = style.font_scale_x / 100.0
                scale_y = style.font_scale_y / 100.0
                rgb = ((style.color >> 16) & 0xFF, (style.color >> 8) & 0xFF, style.color & 0xFF)

                for ch in seg.text:
                    if not self._fonts:
                        cursor_x += 8.0 * scale_x
                        continue
                    glyph = self.glyph(ch, effective_size)
                    if has_rotation:
                        blit_rotated(
                            buffer, width, height, glyph,
                            cursor_x + glyph.xmin, cursor_y + glyph.ymin,
                            line.rot_z, rgb, combined_alpha,
                        )
                    else:
                        base_x = int(cursor_x) + glyph.xmin
                        base_y = int(cursor_y) + glyph.ymin
                        for x, y, coverage in _covered(glyph):
                            _put_pixel(
                                buffer, width, height,
                                base_x + int(x * scale_x), base_y + int(y * scale_y),
                                rgb, _apply_alpha(coverage, combined_alpha),
                            )
                    cursor_x += glyph.advance_width * scale_x

            cursor_y += line_height
            if cursor_y >= height:
                break
        return bytes(buffer)