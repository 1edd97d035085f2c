"""図形モードのサンプリングと輪郭化のテスト。"""

from __future__ import annotations

import math

import pytest

from bookmark_gen.core.document import FrameRect
from bookmark_gen.core.params import BookmarkParams, Margins, normalize_params
from bookmark_gen.core.shapes import SHAPE_KINDS, ShapeDescriptor, sample_shapes, shape_outline


def _params(seed: str) -> BookmarkParams:
    return normalize_params(BookmarkParams(seed=seed, mode="shape"))


def test_sample_shapes_is_deterministic() -> None:
    assert sample_shapes(_params("abc123")) == sample_shapes(_params("abc123"))
    assert sample_shapes(_params("abc123")) != sample_shapes(_params("other"))


def test_samples_stay_in_configured_ranges() -> None:
    p = _params("ranges")
    shapes = sample_shapes(p)
    assert [s.kind for s in shapes] == list(SHAPE_KINDS)

    ranges = {
        "circle": p.shapes.circle_size,
        "rect": p.shapes.rect_size,
        "small_rect": p.shapes.small_rect_size,
        "triangle": p.shapes.triangle_size,
    }
    for s in shapes:
        cx, cy = s.center
        assert p.margins.left <= cx <= p.width - p.margins.right
        assert p.margins.top <= cy <= p.height - p.margins.bottom
        lo, hi = ranges[s.kind]
        assert lo <= s.size <= hi
        assert p.shapes.noise.angle_min <= s.angle <= p.shapes.noise.angle_max


def test_centers_follow_the_frame_rect() -> None:
    p = normalize_params(
        BookmarkParams(seed="frame", mode="shape", margins=Margins(top=40.0, right=10.0, bottom=60.0, left=20.0))
    )
    frame = FrameRect.from_params(p)
    assert (frame.right, frame.bottom) == pytest.approx((38.0, 104.0))
    for s in sample_shapes(p):
        cx, cy = s.center
        assert frame.x <= cx <= frame.right
        assert frame.y <= cy <= frame.bottom


def test_shape_outline_areas() -> None:
    circle = shape_outline(ShapeDescriptor("circle", (0.0, 0.0), 10.0, 0.0))
    rect = shape_outline(ShapeDescriptor("rect", (0.0, 0.0), 10.0, 33.0))
    tri = shape_outline(ShapeDescriptor("triangle", (0.0, 0.0), 10.0, 0.0))
    assert circle is not None and rect is not None and tri is not None

    assert circle.area == pytest.approx(math.pi * 100.0, rel=1e-2)
    assert rect.area == pytest.approx(100.0)
    assert tri.area == pytest.approx(3.0 * math.sqrt(3.0) / 4.0 * 100.0)


def test_rotation_is_about_center() -> None:
    base = shape_outline(ShapeDescriptor("small_rect", (5.0, 7.0), 4.0, 0.0))
    turned = shape_outline(ShapeDescriptor("small_rect", (5.0, 7.0), 4.0, 45.0))
    assert base is not None and turned is not None
    assert base.bounds == pytest.approx((3.0, 5.0, 7.0, 9.0))
    h = 2.0 * math.sqrt(2.0)
    assert turned.bounds == pytest.approx((5.0 - h, 7.0 - h, 5.0 + h, 7.0 + h))


def test_triangle_points_up() -> None:
    tri = shape_outline(ShapeDescriptor("triangle", (0.0, 0.0), 10.0, 0.0))
    assert tri is not None
    _minx, miny, _maxx, maxy = tri.bounds
    assert miny == pytest.approx(-10.0)
    assert maxy == pytest.approx(5.0)


def test_invalid_shapes() -> None:
    assert shape_outline(ShapeDescriptor("circle", (0.0, 0.0), 0.0, 0.0)) is None
    with pytest.raises(ValueError):
        shape_outline(ShapeDescriptor("star", (0.0, 0.0), 1.0, 0.0))
