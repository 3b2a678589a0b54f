# subrender

`subrender` turns the dialogue events of an Advanced SubStation Alpha (`.ass`)
script into renderable frames. It reads the `Dialogue:` lines straight from
the script text, interprets the common override tags inside each line, and
draws the visible lines into a flat pixel buffer.

## What is in the package

- `subrender.model` – the frame model: `Frame`, `RenderedLine`, `Segment`,
  `StyleState`, `Pos`, `Movement` and `ClipRect`. `RenderedLine.text` joins
  the text of all its segments.
- `subrender.events` – `parse_time`, `parse_dialogue_line`, `extract_pos`,
  `parse_dialogues` and the `Dialogue` record (start and end in seconds).
- `subrender.overrides` – `render_dialogue`, which splits dialogue text into
  styled segments, and `fade_alpha`. Tags understood: `\b`, `\i`, `\u`, `\s`,
  `\fs` (kept only when in (0, 200]), `\fscx`/`\fscy` (clamped to 1–1000),
  `\bord`, `\shad`, `\be` (clamped to 0–10), `\alpha&Hxx&`, `\an` (1–9),
  `\frx`/`\fry`/`\frz`, `\fad(in,out)`, `\c`/`\1c` (`&HBBGGRR&`) and `\r`.
  `\pos`, `\move` and `\clip` are recognised but leave the style unchanged.
  Line-level alpha, rotation, fade and alignment come from the style in
  effect at the end of the line.
- `subrender.software` – `SoftwareRenderer`, which draws glyphs rasterised
  with Pillow into an RGBA byte buffer, with horizontal/vertical alignment,
  horizontal and vertical scaling and rotation about `\frz` (`blit_rotated`).
  `Glyph` is the rasterised glyph it works with.
- `subrender.atlas` – `GlyphAtlas` (row-by-row packing into a square texture,
  raising `AtlasFullError` when full), `GlyphInfo`, `TextVertex` (packs to
  nine little-endian floats with `to_bytes()`), `glyph_quad` (two triangles
  per glyph) and `orthographic_projection`.
- `subrender.hardware` – `HardwareRenderer`, which packs glyphs into a
  `GlyphAtlas`, turns every character into a textured quad and rasterises the
  triangles into a BGRA (sRGB-encoded) buffer with back-face culling, bilinear
  atlas sampling and alpha blending. Its `render` keeps each dialogue's text as
  one segment in the default style, without interpreting tags.
- `subrender.text_shaping` – `TextShaper` (fixed-advance shaping: one glyph
  per character, advance `0.6 × font_size`, line height `1.2 × font_size`),
  `font_metrics`, and `detect_text_properties`, which returns the dominant
  `WritingScript` and a `TextDirection`.
- `subrender.layout` – `TextLayout`, which wraps words greedily to
  `max_width` pixels.

## Installation

```
pip install .
```

With the test requirements:

```
pip install ".[test]"
```

## Rendering a frame

```python
from subrender.software import SoftwareRenderer

script_text = """[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Dialogue: 0,0:00:00.00,0:00:05.00,Default,,0,0,0,,{\\b1\\fad(500,500)}Hello World
"""

with open("DejaVuSans.ttf", "rb") as fh:
    font = fh.read()

renderer = SoftwareRenderer(script_text, font)
frame = renderer.render(1.0)           # lines visible at one second
for line in frame.lines:
    print(line.alpha, [segment.text for segment in line.segments])

rgba = renderer.render_bitmap(1.0, 640, 480, 24.0)
assert len(rgba) == 640 * 480 * 4
```

`SoftwareRenderer` takes the bytes of one font file or an iterable of several,
in priority order; the first font with a glyph for a character is used. Fonts
that fail to load are skipped. With no usable font a warning is logged and
text only moves the pen, so the bitmap stays empty.

A dialogue is visible when the time lies between its start and end, both
included. When a line carries `\fad(in,out)`, its alpha ramps up over the
first `in` milliseconds and down over the last `out` milliseconds.

`HardwareRenderer(script_text, font_data)` works the same way through
`render_to_texture(time, width, height, font_size)`, which returns a BGRA
buffer. The font is loaded lazily; invalid font data or a full atlas raises
`HardwareRendererError` from `render_to_texture`. `backend()` returns `"cpu"`.

## Parsing dialogue lines

```python
from subrender.events import parse_dialogue_line, parse_time, extract_pos

parse_time("0:01:30.25")               # 90.25
dialogue = parse_dialogue_line("0,0:00:01.00,0:00:05.00,Default,,0,0,0,,Hello World")
dialogue.start, dialogue.end, dialogue.text   # (1.0, 5.0, "Hello World")
extract_pos("{\\pos(100,200)}text")    # Pos(x=100.0, y=200.0)
```

`parse_time` and `parse_dialogue_line` raise `ValueError` on malformed input;
`parse_dialogues` skips malformed lines.

## Shaping and wrapping text

```python
from subrender.text_shaping import TextShaper, TextDirection
from subrender.layout import TextLayout

shaper = TextShaper()
shaped = shaper.shape_text("Hello", "Arial", TextDirection.LEFT_TO_RIGHT)
len(shaped.glyphs)                     # 5

shaper.detect_text_properties("مرحبا بالعالم")
# (WritingScript.ARABIC, TextDirection.RIGHT_TO_LEFT)

layout = TextLayout(shaper, max_width=100.0)
lines = layout.layout_text("This is a long text that should wrap", "Arial",
                           TextDirection.LEFT_TO_RIGHT)
```

With the default infinite `max_width`, `layout_text` returns a single line.
`TextShapingError` is the shaping error type; the fixed-advance shaper does
not raise it.

## What the package does not do

- It has no command-line program; it is a library.
- It does not build a full script model: styles from `[V4+ Styles]` and
  `[Script Info]` settings are ignored, and every line starts from the default
  `StyleState`.
- Shaping uses approximate fixed metrics, not real font tables, so complex
  scripts are not shaped and fonts are not chosen per script.
- `\pos`, `\move` and `\clip` do not affect drawing; `Dialogue.pos` records the
  first `\pos` only. `\frx` and `\fry` only switch on the rotated drawing path,
  which rotates about the Z axis.
- `HardwareRenderer` runs its pipeline on the CPU; it does not use a GPU.

## Running the tests

```
pytest
```