"""塗り輪郭 `Outline` のブーリアン合成のテスト。"""

from __future__ import annotations

import itertools
import math

import numpy as np
import pytest
from shapely.geometry import LineString, Polygon

from bookmark_gen.core.outline import (
    Outline,
    fmt_number,
    intersect,
    polygon,
    rectangle,
    rings_to_outline,
    sanitize,
    union_all,
)


def _square(x: float, y: float, size: float) -> np.ndarray:
    return np.array([(x, y), (x + size, y), (x + size, y + size), (x, y + size)], dtype=np.float64)


def test_outline_rejects_empty_and_non_polygonal() -> None:
    with pytest.raises(ValueError):
        Outline(Polygon())
    with pytest.raises(TypeError):
        Outline(LineString([(0, 0), (1, 1)]))


def test_from_geometry_drops_degenerate_input() -> None:
    assert Outline.from_geometry(None) is None
    assert Outline.from_geometry(Polygon([(0, 0), (1, 0), (2, 0)])) is None
    assert sanitize(Polygon([(0, 0), (math.nan, 0), (1, 1)])) is None


def test_bowtie_is_repaired() -> None:
    out = polygon([(0, 0), (2, 2), (2, 0), (0, 2)])
    assert out is not None
    assert out.area == pytest.approx(2.0)


def test_union_area_of_overlapping_squares() -> None:
    a = rectangle(0, 0, 2, 2)
    b = rectangle(1, 1, 2, 2)
    assert a is not None and b is not None
    merged = a.union(b)
    assert merged is not None
    assert merged.area == pytest.approx(7.0)


def test_union_order_does_not_change_area() -> None:
    shapes = [rectangle(0, 0, 3, 1), rectangle(1, -1, 1, 3), polygon([(0, 0), (4, 0), (2, 3)])]
    areas = {round(union_all(perm).area, 3) for perm in itertools.permutations(shapes)}  # type: ignore[union-attr]
    assert len(areas) == 1

    frame = rectangle(0.5, -0.5, 2.5, 3.0)
    clipped = {
        round(intersect(union_all(perm), frame).area, 3)  # type: ignore[arg-type, union-attr]
        for perm in itertools.permutations(shapes)
    }
    assert len(clipped) == 1


def test_union_all_skips_none_and_empty_input() -> None:
    assert union_all([]) is None
    assert union_all([None, None]) is None
    single = rectangle(0, 0, 1, 1)
    assert union_all([None, single, None]) is single


def test_intersect_is_idempotent_and_contained() -> None:
    frame = rectangle(0, 0, 10, 10)
    shape = polygon([(-5, 5), (5, -5), (15, 5), (5, 15)])
    clipped = intersect(shape, frame)
    assert clipped is not None
    assert frame.contains(clipped)  # type: ignore[union-attr]

    again = intersect(clipped, frame)
    assert again is not None
    assert again.area == pytest.approx(clipped.area)


def test_intersect_disjoint_is_none() -> None:
    assert intersect(rectangle(0, 0, 1, 1), rectangle(5, 5, 1, 1)) is None
    assert intersect(None, rectangle(0, 0, 1, 1)) is None


def test_rectangle_requires_positive_size() -> None:
    assert rectangle(0, 0, 0, 5) is None
    assert rectangle(0, 0, 5, -1) is None


def test_rings_with_opposite_orientation_make_hole() -> None:
    outer = _square(0, 0, 10)
    hole = _square(3, 3, 4)[::-1]
    for rule in ("nonzero", "evenodd"):
        out = rings_to_outline([outer, hole], fill_rule=rule)
        assert out is not None
        assert out.area == pytest.approx(100.0 - 16.0)


def test_same_orientation_overlap_depends_on_fill_rule() -> None:
    outer = _square(0, 0, 10)
    inner = _square(3, 3, 4)
    nonzero = rings_to_outline([outer, inner], fill_rule="nonzero")
    evenodd = rings_to_outline([outer, inner], fill_rule="evenodd")
    assert nonzero is not None and evenodd is not None
    assert nonzero.area == pytest.approx(100.0)
    assert evenodd.area == pytest.approx(84.0)


def test_nonzero_keeps_island_inside_hole() -> None:
    outer = _square(0, 0, 10)
    hole = _square(2, 2, 6)[::-1]
    island = _square(4, 4, 2)
    out = rings_to_outline([island, hole, outer], fill_rule="nonzero")
    assert out is not None
    assert out.area == pytest.approx(100.0 - 36.0 + 4.0)


def test_rings_to_outline_ignores_degenerate_rings() -> None:
    assert rings_to_outline([]) is None
    assert rings_to_outline([np.array([(0, 0), (1, 1)])]) is None


def test_contours_and_path_data() -> None:
    out = rings_to_outline([_square(0, 0, 10), _square(3, 3, 4)[::-1]])
    assert out is not None
    rings = list(out.contours())
    assert len(rings) == 2
    for ring in rings:
        assert np.allclose(ring[0], ring[-1])

    d = out.to_path_data(decimals=1)
    assert d.count("M ") == 2
    assert d.count("Z") == 2
    assert "10.0" in d


def test_fmt_number_is_deterministic() -> None:
    assert fmt_number(1.0) == "1.000"
    assert fmt_number(-0.0001) == "0.000"
    assert fmt_number(2.5, 0) == "2"
    assert fmt_number(-1.25, 1) == "-1.2"
