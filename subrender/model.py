"""Data structures shared by the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Pos:
    """A point in script coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class ClipRect:
    """A rectangular clipping region."""

    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class StyleState:
    """Formatting in effect for a run of text.

    ``color`` is RRGGBB, ``alpha`` runs from 0.0 (transparent) to 1.0,
    scales are percentages and rotations are in degrees.  ``align`` uses
    numpad layout (1-9) and ``fade`` holds fade-in/fade-out milliseconds.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    color: int = 0xFFFFFF
    alpha: float = 1.0
    font_size: float = 32.0
    font_name: str | None = None
    font_scale_x: float = 100.0
    font_scale_y: float = 100.0
    border_style: int = 0
    border_size: float = 2.0
    shadow_depth: float = 0.0
    blur_edges: float = 0.0
    align: int = 2
    rot_x: float = 0.0
    rot_y: float = 0.0
    rot_z: float = 0.0
    fade: tuple[int, int] | None = None
    clip_rect: ClipRect | None = None


@dataclass(frozen=True)
class Segment:
    """A run of text drawn with one style."""

    text: str
    style: StyleState = field(default_factory=StyleState)


@dataclass(frozen=True)
class Movement:
    """Linear movement between two points; times are seconds from line start."""

    start_pos: Pos
    end_pos: Pos
    start_time: float
    end_time: float


@dataclass
class RenderedLine:
    """One dialogue line ready for drawing."""

    segments: list[Segment] = field(default_factory=list)
    alpha: float = 1.0
    rot_x: float = 0.0
    rot_y: float = 0.0
    rot_z: float = 0.0
    fade: tuple[int, int] | None = None
    align: int = 2
    pos: Pos | None = None
    movement: Movement | None = None

    @property
    def text(self) -> str:
        """The plain text of all segments joined together."""
        return "".join(segment.text for segment in self.segments)


@dataclass
class Frame:
    """All lines visible at one instant."""

    lines: list[RenderedLine] = field(default_factory=list)