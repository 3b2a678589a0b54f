"""Interpretation of override tag blocks in dialogue text."""

from __future__ import annotations

import math
import re
import string
from collections.abc import Iterator
from dataclasses import replace

from subrender.model import RenderedLine, Segment, StyleState

_BLOCK = re.compile(r"\{([^}]*)\}")
_SEGMENT_SPLIT = re.compile(r"(?=\{)")
_TAG_NAME = re.compile(r"(\d?[A-Za-z]*)(.*)", re.DOTALL)

_FLAG_TAGS = {"b": "bold", "i": "italic", "u": "underline", "s": "strikethrough"}
_ROTATION_TAGS = {"frx": "rot_x", "fry": "rot_y", "frz": "rot_z"}
_CLAMPED_TAGS = {
    "fscx": ("font_scale_x", 1.0, 1000.0),
    "fscy": ("font_scale_y", 1.0, 1000.0),
    "bord": ("border_size", 0.0, 10.0),
    "shad": ("shadow_depth", 0.0, 10.0),
    "be": ("blur_edges", 0.0, 10.0),
}
_KNOWN_TAGS = (
    set(_FLAG_TAGS)
    | set(_ROTATION_TAGS)
    | set(_CLAMPED_TAGS)
    | {"fs", "alpha", "an", "fad", "c", "r", "pos", "move", "clip"}
)
_NAME_ALIASES = {"1c": "c"}


def _parse_float(text: str) -> float | None:
    if not text or "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_uint(text: str, limit: int) -> int | None:
    if not text or not text.isdigit() or not text.isascii():
        return None
    value = int(text)
    return value if value <= limit else None


def _parse_hex(text: str, limit: int) -> int | None:
    if not text or any(ch not in string.hexdigits for ch in text):
        return None
    value = int(text, 16)
    return value if value <= limit else None


def _clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def _split_tag(raw: str) -> tuple[str, str]:
    match = _TAG_NAME.match(raw)
    assert match is not None
    name, rest = match.group(1), match.group(2)
    name = _NAME_ALIASES.get(name, name)
    if name not in _KNOWN_TAGS and name.startswith("r"):
        name, rest = "r", name[1:] + rest
    args = rest.strip()
    if args.startswith("("):
        args = args[1:]
        if args.endswith(")"):
            args = args[:-1]
    return name, args


def _tags(block: str) -> Iterator[tuple[str, str]]:
    """Yield (name, arguments) for each top-level tag of a block."""
    current: list[str] | None = None
    depth = 0
    for ch in block:
        if ch == "\\" and depth == 0:
            if current is not None:
                yield _split_tag("".join(current))
            current = []
            continue
        if current is None:
            continue
        if ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        current.append(ch)
    if current is not None:
        yield _split_tag("".join(current))


def _apply_tag(state: StyleState, name: str, args: str) -> StyleState:
    if name in _FLAG_TAGS:
        return replace(state, **{_FLAG_TAGS[name]: not args.startswith("0")})
    if name in _CLAMPED_TAGS:
        attr, low, high = _CLAMPED_TAGS[name]
        value = _parse_float(args.strip())
        return state if value is None else replace(state, **{attr: _clamp(value, low, high)})
    if name in _ROTATION_TAGS:
        value = _parse_float(args.strip())
        return state if value is None else replace(state, **{_ROTATION_TAGS[name]: value})
    if name == "fs":
        size = _parse_float(args.strip())
        if size is not None and not math.isnan(size) and 0.0 < size <= 200.0:
            return replace(state, font_size=size)
        return state
    if name == "alpha":
        text = args.strip()
        if text.startswith("&H") and text.endswith("&") and len(text) >= 3:
            value = _parse_hex(text[2:-1], 0xFF)
            if value is not None:
                return replace(state, alpha=1.0 - value / 255.0)
        return state
    if name == "an":
        value = _parse_uint(args.strip(), 0xFF)
        if value is not None and 1 <= value <= 9:
            return replace(state, align=value)
        return state
    if name == "fad":
        numbers = [
            value
            for value in (_parse_uint(part.strip(), 0xFFFF) for part in args.split(","))
            if value is not None
        ]
        if len(numbers) >= 2:
            return replace(state, fade=(numbers[0], numbers[1]))
        return state
    if name == "c":
        start = args.find("H")
        if start >= 0:
            end = args.find("&", start + 1)
            if end >= 0:
                value = _parse_hex(args[start + 1 : end], 0xFFFFFFFF)
                if value is not None:
                    blue = (value >> 16) & 0xFF
                    green = (value >> 8) & 0xFF
                    red = value & 0xFF
                    return replace(state, color=(red << 16) | (green << 8) | blue)
        return state
    if name == "r":
        return StyleState()
    return state


def _text_segments(chunk: str, state: StyleState) -> list[Segment]:
    return [Segment(part, state) for part in _SEGMENT_SPLIT.split(chunk) if part]


def render_dialogue(text: str) -> RenderedLine:
    """Split dialogue text into styled segments, applying override tags.

    Line-level properties (alpha, rotation, fade, alignment) come from the
    style in effect at the end of the text.
    """
    state = StyleState()
    segments: list[Segment] = []
    position = 0
    for match in _BLOCK.finditer(text):
        segments.extend(_text_segments(text[position : match.start()], state))
        for name, args in _tags(match.group(1)):
            state = _apply_tag(state, name, args)
        position = match.end()
    segments.extend(_text_segments(text[position:], state))

    return RenderedLine(
        segments=segments,
        alpha=state.alpha,
        rot_x=state.rot_x,
        rot_y=state.rot_y,
        rot_z=state.rot_z,
        fade=state.fade,
        align=state.align,
    )


def fade_alpha(
    fade: tuple[int, int] | None, time: float, start: float, end: float
) -> float:
    """Opacity factor in [0, 1] for a line fading in and out.

    ``fade`` holds fade-in and fade-out durations in milliseconds; times are
    seconds.  Without a fade the line is fully opaque.
    """
    if fade is None:
        return 1.0
    fade_in = fade[0] / 1000.0
    fade_out = fade[1] / 1000.0
    since_start = time - start
    until_end = end - time
    if since_start < fade_in:
        factor = since_start / fade_in
    elif until_end < fade_out:
        factor = until_end / fade_out
    else:
        factor = 1.0
    return _clamp(factor, 0.0, 1.0)