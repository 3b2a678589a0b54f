import pytest

from subrender.events import (
    Dialogue,
    extract_pos,
    parse_dialogue_line,
    parse_dialogues,
    parse_time,
)
from subrender.model import Pos

TEST_SCRIPT = """[Script Info]
Title: Test Script

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,32,&H00FFFFFF,&H000000FF,&H00000000,&H80000000,0,0,0,0,100,100,0,0,1,2,0,2,10,10,10,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
Dialogue: 0,0:00:00.00,0:00:05.00,Default,,0,0,0,,Hello World
Dialogue: 0,0:00:02.00,0:00:07.00,Default,,0,0,0,,Test Subtitle
"""


def test_parse_dialogue_line():
    dialogue = parse_dialogue_line("0,0:00:01.00,0:00:05.00,Default,,0,0,0,,Hello World")
    assert dialogue.start == 1.0
    assert dialogue.end == 5.0
    assert dialogue.text == "Hello World"
    assert dialogue.pos is None


@pytest.mark.parametrize(
    "stamp, expected",
    [("0:00:01.50", 1.5), ("0:01:30.25", 90.25), ("1:00:00.00", 3600.0)],
)
def test_parse_time(stamp, expected):
    assert parse_time(stamp) == expected


@pytest.mark.parametrize(
    "stamp", ["", "invalid", "0:00:01", "0:xx:01.00", "0:00", "-1:00:00.00", " 0:00:01.00"]
)
def test_parse_time_rejects_malformed(stamp):
    with pytest.raises(ValueError):
        parse_time(stamp)


def test_parse_time_single_digit_centiseconds():
    assert parse_time("0:00:01.5") == pytest.approx(1.05)


def test_extract_pos():
    assert extract_pos("Some text \\pos(100,200) more text") == Pos(100.0, 200.0)


def test_extract_pos_inside_block_with_spaces():
    assert extract_pos("{\\an8\\pos( 12.5 , -3 )}Hi") == Pos(12.5, -3.0)


@pytest.mark.parametrize(
    "text", ["no tag here", "\\pos(100,200", "\\pos(100)", "\\pos(a,b)"]
)
def test_extract_pos_missing_or_invalid(text):
    assert extract_pos(text) is None


def test_text_keeps_commas():
    dialogue = parse_dialogue_line("0,0:00:01.00,0:00:02.00,Default,,0,0,0,,one, two, three")
    assert dialogue.text == "one, two, three"


def test_dialogue_line_with_too_few_fields():
    with pytest.raises(ValueError):
        parse_dialogue_line("invalid,format,here")


def test_dialogue_line_with_bad_time():
    with pytest.raises(ValueError):
        parse_dialogue_line("0,invalid,time,Default,,0,0,0,,Text")


def test_parse_dialogues_from_script():
    dialogues = parse_dialogues(TEST_SCRIPT)
    assert dialogues == [
        Dialogue(0.0, 5.0, "Hello World"),
        Dialogue(2.0, 7.0, "Test Subtitle"),
    ]


def test_parse_dialogues_skips_comments_and_malformed_lines():
    script = (
        "[Events]\n"
        "Comment: 0,0:00:00.00,0:00:01.00,Default,,0,0,0,,ignored\n"
        "Dialogue: invalid,format,here\n"
        "Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,{\\pos(10,20)}kept\r\n"
    )
    dialogues = parse_dialogues(script)
    assert len(dialogues) == 1
    assert dialogues[0].text == "{\\pos(10,20)}kept"
    assert dialogues[0].pos == Pos(10.0, 20.0)
    assert (dialogues[0].start, dialogues[0].end) == (1.0, 2.0)


def test_parse_dialogues_empty():
    assert parse_dialogues("") == []