"""Extraction of timed dialogue events from serialized script text."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from subrender.model import Pos

_UINT = re.compile(r"\+?[0-9]+")
_UINT_MAX = 0xFFFF_FFFF
_DIALOGUE_PREFIX = "Dialogue:"
_POS_TAG = "\\pos("


@dataclass
class Dialogue:
    """A dialogue event; ``start`` and ``end`` are in seconds."""

    start: float
    end: float
    text: str
    pos: Pos | None = None


def _parse_uint(text: str) -> int:
    if not _UINT.fullmatch(text):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(text)
    if value > _UINT_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def _parse_float(text: str) -> float | None:
    if not text or "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_time(s: str) -> float:
    """Parse an ``h:mm:ss.cs`` timestamp into seconds.

    Raises ValueError when the timestamp is malformed.
    """
    parts = s.split(":")
    if len(parts) < 3:
        raise ValueError(f"malformed timestamp: {s!r}")
    hours = _parse_uint(parts[0])
    minutes = _parse_uint(parts[1])
    sec_parts = parts[2].split(".")
    if len(sec_parts) < 2:
        raise ValueError(f"timestamp lacks centiseconds: {s!r}")
    seconds = _parse_uint(sec_parts[0])
    centis = _parse_uint(sec_parts[1])
    return hours * 3600.0 + minutes * 60.0 + float(seconds) + centis / 100.0


def parse_dialogue_line(rest: str) -> Dialogue:
    """Parse the fields after ``Dialogue:`` into a Dialogue.

    The text field is everything after the ninth comma, so it may itself
    contain commas.  Raises ValueError on missing fields or bad times.
    """
    fields = rest.split(",", 9)
    if len(fields) < 10:
        raise ValueError(f"dialogue line has {len(fields)} fields, expected 10")
    start = parse_time(fields[1].strip())
    end = parse_time(fields[2].strip())
    return Dialogue(start=start, end=end, text=fields[9])


def extract_pos(text: str) -> Pos | None:
    """Return the coordinates of the first ``\\pos(x,y)`` tag, if any."""
    tag_start = text.find(_POS_TAG)
    if tag_start < 0:
        return None
    rest = text[tag_start + len(_POS_TAG):]
    close = rest.find(")")
    if close < 0:
        return None
    coords = rest[:close].split(",")
    if len(coords) < 2:
        return None
    x = _parse_float(coords[0].strip())
    y = _parse_float(coords[1].strip())
    if x is None or y is None:
        return None
    return Pos(x, y)


def _lines(text: str) -> Iterator[str]:
    for line in text.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def parse_dialogues(script_text: str) -> list[Dialogue]:
    """Collect every well-formed Dialogue line of a script, in order.

    Malformed Dialogue lines are skipped.  Each dialogue's ``pos`` is taken
    from the first ``\\pos`` tag in its text.
    """
    dialogues: list[Dialogue] = []
    for line in _lines(script_text):
        if not line.startswith(_DIALOGUE_PREFIX):
            continue
        try:
            dialogue = parse_dialogue_line(line[len(_DIALOGUE_PREFIX):].strip())
        except ValueError:
            continue
        dialogue.pos = extract_pos(dialogue.text)
        dialogues.append(dialogue)
    return dialogues