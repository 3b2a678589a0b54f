import pytest

from subrender.model import StyleState
from subrender.overrides import fade_alpha, render_dialogue


def test_render_plain_dialogue():
    text = "Test dialogue text"
    rendered = render_dialogue(text)
    assert len(rendered.segments) == 1
    assert rendered.segments[0].text == text
    assert rendered.alpha == 1.0
    assert rendered.align == 2


def test_bold_and_italic_segments():
    rendered = render_dialogue("{\\b1}Bold{\\b0} and {\\i1}italic{\\i0}")
    texts = [s.text for s in rendered.segments]
    assert texts == ["Bold", " and ", "italic"]
    assert rendered.segments[0].style.bold is True
    assert rendered.segments[1].style.bold is False
    assert rendered.segments[2].style.italic is True


def test_flag_without_argument_enables():
    rendered = render_dialogue("{\\u\\s}x")
    style = rendered.segments[0].style
    assert style.underline is True
    assert style.strikethrough is True


def test_colour_is_converted_from_bgr():
    rendered = render_dialogue("{\\c&H0000FF&}Red{\\c&HFF0000&}Blue")
    assert rendered.segments[0].style.color == 0xFF0000
    assert rendered.segments[1].style.color == 0x0000FF


def test_alpha_tag():
    rendered = render_dialogue("{\\alpha&H80&}half")
    assert rendered.segments[0].style.alpha == pytest.approx(1.0 - 128 / 255)
    assert rendered.alpha == pytest.approx(1.0 - 128 / 255)


def test_font_size_limits():
    assert render_dialogue("{\\fs20}x").segments[0].style.font_size == 20.0
    assert render_dialogue("{\\fs500}x").segments[0].style.font_size == 32.0
    assert render_dialogue("{\\fs0}x").segments[0].style.font_size == 32.0


def test_clamped_tags():
    style = render_dialogue("{\\fscx2000\\fscy0\\bord12\\shad3\\be1}x").segments[0].style
    assert style.font_scale_x == 1000.0
    assert style.font_scale_y == 1.0
    assert style.border_size == 10.0
    assert style.shadow_depth == 3.0
    assert style.blur_edges == 1.0


def test_line_level_properties():
    rendered = render_dialogue("{\\an8\\frz45\\frx10\\fry-5\\fad(500,1000)}Top")
    assert rendered.align == 8
    assert rendered.rot_z == 45.0
    assert rendered.rot_x == 10.0
    assert rendered.rot_y == -5.0
    assert rendered.fade == (500, 1000)


def test_invalid_alignment_is_ignored():
    assert render_dialogue("{\\an12}x").align == 2


def test_reset_restores_defaults():
    rendered = render_dialogue("{\\b1\\c&H0000FF&}a{\\r}b")
    assert rendered.segments[0].style.bold is True
    assert rendered.segments[1].style == StyleState()


def test_animated_tags_are_not_applied():
    rendered = render_dialogue("{\\t(0,1000,\\frz360)}spin")
    assert rendered.rot_z == 0.0
    assert rendered.text == "spin"


def test_position_tags_do_not_change_text():
    rendered = render_dialogue("{\\pos(100,200)\\move(1,2,3,4)}Moving")
    assert [s.text for s in rendered.segments] == ["Moving"]
    assert rendered.pos is None


def test_unclosed_block_is_kept_as_text():
    rendered = render_dialogue("a{\\b1 open")
    assert [s.text for s in rendered.segments] == ["a", "{\\b1 open"]
    assert rendered.segments[1].style.bold is False


def test_trailing_block_produces_no_empty_segment():
    rendered = render_dialogue("text{\\b0}")
    assert [s.text for s in rendered.segments] == ["text"]


def test_fade_alpha_fading_in_and_out():
    assert fade_alpha((1000, 1000), 0.5, 0.0, 5.0) == pytest.approx(0.5)
    assert fade_alpha((1000, 1000), 4.5, 0.0, 5.0) == pytest.approx(0.5)
    assert fade_alpha((1000, 1000), 2.0, 0.0, 5.0) == 1.0


def test_fade_alpha_without_fade():
    assert fade_alpha(None, 1.0, 0.0, 5.0) == 1.0


def test_fade_alpha_is_clamped():
    assert fade_alpha((1000, 1000), 5.5, 0.0, 5.0) == 0.0
    assert fade_alpha((0, 0), 2.0, 0.0, 5.0) == 1.0