import struct

import pytest

from subrender.atlas import (
    AtlasFullError,
    GlyphAtlas,
    TextVertex,
    glyph_quad,
    orthographic_projection,
)


def _transform(columns, vector):
    return tuple(sum(columns[j][i] * vector[j] for j in range(4)) for i in range(4))


def test_first_allocation_starts_at_origin():
    atlas = GlyphAtlas()
    coords = atlas.allocate(64, 32)
    assert coords[0] == 0.0 and coords[1] == 0.0
    assert coords[2] * atlas.atlas_size == pytest.approx(64)
    assert coords[3] * atlas.atlas_size == pytest.approx(32)


def test_allocations_are_adjacent_in_a_row():
    atlas = GlyphAtlas()
    first = atlas.allocate(10, 20)
    second = atlas.allocate(15, 5)
    assert second[0] == first[2]
    assert second[1] == first[1]
    assert atlas.row_height == 20


def test_allocation_wraps_to_next_row():
    atlas = GlyphAtlas(atlas_size=100)
    first = atlas.allocate(60, 10)
    second = atlas.allocate(60, 20)
    assert second[0] == 0.0
    assert second[1] == first[3]
    third = atlas.allocate(10, 5)
    assert third[1] == second[1]
    assert third[0] == second[2]


def test_full_atlas_raises():
    atlas = GlyphAtlas(atlas_size=16)
    atlas.allocate(16, 16)
    with pytest.raises(AtlasFullError, match="Font atlas is full"):
        atlas.allocate(1, 1)


def test_glyph_quad_covers_rectangle():
    tex = (0.1, 0.2, 0.3, 0.4)
    color = (1.0, 0.5, 0.25, 1.0)
    vertices = glyph_quad(10.0, 20.0, 30.0, 40.0, tex, color)
    assert len(vertices) == 6
    corners = {vertex.position[:2] for vertex in vertices}
    assert corners == {(10.0, 20.0), (30.0, 20.0), (10.0, 40.0), (30.0, 40.0)}
    assert all(vertex.color == color for vertex in vertices)
    for vertex in vertices:
        x, y, z = vertex.position
        u, v = vertex.tex_coords
        assert (x == 10.0) == (u == tex[0])
        assert (y == 20.0) == (v == tex[1])
        assert z == 0.0


def test_vertex_bytes_round_trip():
    vertex = TextVertex((1.0, 2.0, 0.0), (0.5, 0.25), (1.0, 0.0, 0.5, 1.0))
    packed = vertex.to_bytes()
    assert struct.unpack("<9f", packed) == (
        *vertex.position,
        *vertex.tex_coords,
        *vertex.color,
    )


def test_orthographic_maps_screen_corners_to_clip_space():
    width, height = 640.0, 480.0
    matrix = orthographic_projection(0.0, width, height, 0.0, -1.0, 1.0)
    top_left = _transform(matrix, (0.0, 0.0, 0.0, 1.0))
    bottom_right = _transform(matrix, (width, height, 0.0, 1.0))
    assert top_left[:2] == pytest.approx((-1.0, 1.0))
    assert bottom_right[:2] == pytest.approx((1.0, -1.0))
    assert top_left[3] == 1.0


def test_orthographic_centre_maps_to_origin():
    matrix = orthographic_projection(0.0, 200.0, 100.0, 0.0, -1.0, 1.0)
    centre = _transform(matrix, (100.0, 50.0, 0.0, 1.0))
    assert centre[:2] == pytest.approx((0.0, 0.0))