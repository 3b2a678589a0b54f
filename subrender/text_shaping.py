"""Text shaping: per-character glyph layout and script/direction detection."""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass


class TextDirection(enum.Enum):
    """Direction in which text runs."""

    LEFT_TO_RIGHT = "ltr"
    RIGHT_TO_LEFT = "rtl"
    TOP_TO_BOTTOM = "ttb"
    BOTTOM_TO_TOP = "btt"


class WritingScript(enum.Enum):
    """Writing systems the shaper recognises."""

    COMMON = "Common"
    LATIN = "Latin"
    ARABIC = "Arabic"
    HEBREW = "Hebrew"
    CYRILLIC = "Cyrillic"
    GREEK = "Greek"
    HIRAGANA = "Hiragana"
    KATAKANA = "Katakana"
    HAN = "Han"
    HANGUL = "Hangul"
    DEVANAGARI = "Devanagari"
    BENGALI = "Bengali"
    TAMIL = "Tamil"
    THAI = "Thai"
    MYANMAR = "Myanmar"
    ETHIOPIC = "Ethiopic"
    CHEROKEE = "Cherokee"
    MONGOLIAN = "Mongolian"

    @property
    def language(self) -> str:
        """A representative language tag for this script."""
        return _LANGUAGES.get(self, "en")


_LANGUAGES = {
    WritingScript.ARABIC: "ar",
    WritingScript.HEBREW: "he",
    WritingScript.CYRILLIC: "ru",
    WritingScript.HIRAGANA: "ja",
    WritingScript.KATAKANA: "ja",
    WritingScript.HANGUL: "ko",
    WritingScript.DEVANAGARI: "hi",
    WritingScript.BENGALI: "bn",
    WritingScript.TAMIL: "ta",
    WritingScript.THAI: "th",
}

_SCRIPT_RANGES: tuple[tuple[int, int, WritingScript], ...] = (
    (0x0041, 0x007A, WritingScript.LATIN),
    (0x00C0, 0x024F, WritingScript.LATIN),
    (0x0600, 0x06FF, WritingScript.ARABIC),
    (0x0750, 0x077F, WritingScript.ARABIC),
    (0x08A0, 0x08FF, WritingScript.ARABIC),
    (0x0590, 0x05FF, WritingScript.HEBREW),
    (0x0400, 0x04FF, WritingScript.CYRILLIC),
    (0x0500, 0x052F, WritingScript.CYRILLIC),
    (0x0370, 0x03FF, WritingScript.GREEK),
    (0x1F00, 0x1FFF, WritingScript.GREEK),
    (0x3040, 0x309F, WritingScript.HIRAGANA),
    (0x30A0, 0x30FF, WritingScript.KATAKANA),
    (0x4E00, 0x9FFF, WritingScript.HAN),
    (0xAC00, 0xD7AF, WritingScript.HANGUL),
    (0x0900, 0x097F, WritingScript.DEVANAGARI),
    (0x0980, 0x09FF, WritingScript.BENGALI),
    (0x0B80, 0x0BFF, WritingScript.TAMIL),
    (0x0E00, 0x0E7F, WritingScript.THAI),
    (0x1000, 0x109F, WritingScript.MYANMAR),
    (0x1200, 0x137F, WritingScript.ETHIOPIC),
    (0x13A0, 0x13FF, WritingScript.CHEROKEE),
    (0x1800, 0x18AF, WritingScript.MONGOLIAN),
)

_RTL_RANGES = ((0x0590, 0x05FF), (0x0600, 0x06FF), (0x0750, 0x077F), (0x08A0, 0x08FF))
_TTB_RANGES = ((0x1800, 0x18AF),)


def _char_script(ch: str) -> WritingScript:
    code = ord(ch)
    for low, high, script in _SCRIPT_RANGES:
        if low <= code <= high:
            return script
    return WritingScript.COMMON


def _char_direction(ch: str) -> TextDirection:
    code = ord(ch)
    if any(low <= code <= high for low, high in _RTL_RANGES):
        return TextDirection.RIGHT_TO_LEFT
    if any(low <= code <= high for low, high in _TTB_RANGES):
        return TextDirection.TOP_TO_BOTTOM
    return TextDirection.LEFT_TO_RIGHT


@dataclass
class ShapedGlyph:
    """One positioned glyph; advances and offsets are in pixels."""

    glyph_id: int
    codepoint: int
    cluster: int
    x_advance: int
    y_advance: int
    x_offset: int
    y_offset: int


@dataclass
class ShapedText:
    """The result of shaping a run of text."""

    glyphs: list[ShapedGlyph]
    total_advance: float
    line_height: float


@dataclass(frozen=True)
class FontMetrics:
    """Vertical metrics of a font at the shaper's size, in pixels."""

    ascender: float
    descender: float
    line_gap: float
    line_height: float
    units_per_em: int


class TextShapingError(Exception):
    """Raised when text cannot be shaped."""

    def __init__(self, message: str = "Text shaping failed") -> None:
        super().__init__(message)


@dataclass
class TextShaper:
    """Shapes text with approximate metrics derived from the font size."""

    font_size: float = 16.0
    dpi: float = 96.0

    def shape_text(self, text: str, font_name: str, direction: TextDirection) -> ShapedText:
        """Lay out one glyph per character with a fixed advance."""
        advance = int(self.font_size * 0.6)
        glyphs = [
            ShapedGlyph(
                glyph_id=ord(ch),
                codepoint=ord(ch),
                cluster=index,
                x_advance=advance,
                y_advance=0,
                x_offset=0,
                y_offset=0,
            )
            for index, ch in enumerate(text)
        ]
        return ShapedText(
            glyphs=glyphs,
            total_advance=len(glyphs) * self.font_size * 0.6,
            line_height=self.font_size * 1.2,
        )

    def font_metrics(self, font_name: str) -> FontMetrics:
        """Approximate metrics for any font at the current size."""
        return FontMetrics(
            ascender=self.font_size * 0.8,
            descender=-self.font_size * 0.2,
            line_gap=self.font_size * 0.2,
            line_height=self.font_size * 1.2,
            units_per_em=1000,
        )

    def detect_text_properties(self, text: str) -> tuple[WritingScript, TextDirection]:
        """Return the dominant script of ``text`` and its reading direction."""
        counts: Counter[WritingScript] = Counter()
        has_rtl = False
        has_ltr = False
        for ch in text:
            counts[_char_script(ch)] += 1
            direction = _char_direction(ch)
            if direction is TextDirection.RIGHT_TO_LEFT:
                has_rtl = True
            elif direction is TextDirection.LEFT_TO_RIGHT:
                has_ltr = True

        specific = {
            script: count
            for script, count in counts.items()
            if script not in (WritingScript.COMMON, WritingScript.LATIN)
        }
        pool = specific or counts
        dominant = max(pool, key=pool.__getitem__) if pool else WritingScript.LATIN

        if dominant in (WritingScript.ARABIC, WritingScript.HEBREW):
            direction = TextDirection.RIGHT_TO_LEFT
        elif dominant is WritingScript.MONGOLIAN:
            direction = TextDirection.TOP_TO_BOTTOM
        elif has_rtl and not has_ltr:
            direction = TextDirection.RIGHT_TO_LEFT
        else:
            direction = TextDirection.LEFT_TO_RIGHT
        return dominant, direction