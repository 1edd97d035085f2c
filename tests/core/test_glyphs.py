"""グリフ輪郭抽出（`GlyphFont`）のテスト。合成フォントは conftest で作る。"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from bookmark_gen.core.glyphs import GlyphFont, load_font

# conftest の合成フォントの寸法。
UNITS_PER_EM = 1000
ADVANCE = 500
KERN_AV = -120
BOX_GLYPH_AREA = 400 * 700 - 200 * 500

SIZE = 3.0
SCALE = SIZE / UNITS_PER_EM


def test_metrics_come_from_font(test_font: GlyphFont) -> None:
    m = test_font.metrics
    assert (m.ascender, m.descender, m.units_per_em) == (800.0, -200.0, 1000.0)
    assert m.ascender_offset(SIZE) == pytest.approx(2.4)
    assert m.descender_offset(SIZE) == pytest.approx(-0.6)


def test_load_font_is_cached(test_font_path, test_font: GlyphFont) -> None:
    assert load_font(test_font_path) is test_font
    assert load_font(str(test_font_path)) is test_font


def test_glyph_with_counter_keeps_hole(test_font: GlyphFont) -> None:
    for rule in ("nonzero", "evenodd"):
        out = test_font.line_outline("A", x=0.0, y=10.0, font_size=SIZE, fill_rule=rule)
        assert out is not None
        assert out.area == pytest.approx(BOX_GLYPH_AREA * SCALE * SCALE, abs=1e-4)
        assert len(list(out.contours())) == 2


def test_glyph_is_placed_on_baseline_with_y_down(test_font: GlyphFont) -> None:
    out = test_font.line_outline("A", x=5.0, y=10.0, font_size=SIZE)
    assert out is not None
    minx, miny, maxx, maxy = out.bounds
    assert minx == pytest.approx(5.0 + 50 * SCALE)
    assert maxx == pytest.approx(5.0 + 450 * SCALE)
    assert miny == pytest.approx(10.0 - 700 * SCALE)
    assert maxy == pytest.approx(10.0)


def test_curved_glyph_is_flattened(test_font: GlyphFont) -> None:
    out = test_font.line_outline("O", x=0.0, y=0.0, font_size=SIZE)
    assert out is not None
    # 2 次ベジエ 4 本の丸（233333 単位²）。
    assert out.area == pytest.approx(233333.3 * SCALE * SCALE, rel=0.02)
    rings = list(out.contours())
    assert len(rings) == 1
    assert rings[0].shape[0] > 8


def test_pair_kerning_comes_from_gpos(test_font: GlyphFont) -> None:
    assert test_font.kerning("cp0041", "cp0056") == KERN_AV
    assert test_font.kerning("cp0056", "cp0041") == 0


def test_kerning_moves_second_glyph(test_font: GlyphFont) -> None:
    kerned = test_font.line_outline("AV", x=0.0, y=0.0, font_size=SIZE, kerning=True)
    plain = test_font.line_outline("AV", x=0.0, y=0.0, font_size=SIZE, kerning=False)
    assert kerned is not None and plain is not None
    assert plain.bounds[2] - kerned.bounds[2] == pytest.approx(-KERN_AV * SCALE)


def test_missing_character_advances_and_warns_once(
    test_font: GlyphFont, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="bookmark_gen.core.glyphs"):
        alone = test_font.line_outline("ж", x=0.0, y=0.0, font_size=SIZE)
        out = test_font.line_outline("AжA", x=0.0, y=0.0, font_size=SIZE)

    assert alone is None
    assert out is not None
    # 欠落文字は .notdef の送り幅だけ進む。
    assert out.bounds[2] == pytest.approx(2 * ADVANCE * SCALE + 450 * SCALE)
    assert out.area == pytest.approx(2 * BOX_GLYPH_AREA * SCALE * SCALE, abs=1e-4)

    warnings = [r for r in caplog.records if "U+0436" in r.getMessage()]
    assert len(warnings) == 1


def test_blank_text_has_no_outline(test_font: GlyphFont) -> None:
    assert test_font.line_outline("", x=0.0, y=0.0, font_size=SIZE) is None
    assert test_font.line_outline("   ", x=0.0, y=0.0, font_size=SIZE) is None


def test_precision_quantizes_coordinates(test_font: GlyphFont) -> None:
    rings = test_font.glyph_rings(
        "cp0041", x=0.333, y=20.777, scale=0.01, precision=0, segment_length=0.1
    )
    assert rings
    for ring in rings:
        assert np.array_equal(ring, np.round(ring))

    fine = test_font.glyph_rings(
        "cp0041", x=0.333, y=20.777, scale=0.01, precision=3, segment_length=0.1
    )
    assert any(not np.array_equal(ring, np.round(ring)) for ring in fine)
