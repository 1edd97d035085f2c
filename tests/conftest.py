"""テスト共通の fixture（合成 TrueType フォントなど）。"""

from __future__ import annotations

from pathlib import Path

import pytest

from bookmark_gen.core.glyphs import GlyphFont, load_font
from bookmark_gen.core.runtime_config import set_config_path

UNITS_PER_EM = 1000
ASCENT = 800
DESCENT = -200
ADVANCE = 500
KERN_AV = -120

# 箱型グリフ（穴あき）の面積（フォント単位²）。
BOX_GLYPH_AREA = 400 * 700 - 200 * 500


def _glyph_name(code: int) -> str:
    return f"cp{code:04X}"


def _draw_box_with_hole(pen) -> None:
    # 外周は時計回り（Y+上）、穴は反時計回り。
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((450, 700))
    pen.lineTo((450, 0))
    pen.closePath()
    pen.moveTo((150, 100))
    pen.lineTo((350, 100))
    pen.lineTo((350, 600))
    pen.lineTo((150, 600))
    pen.closePath()


def _draw_round(pen) -> None:
    pen.moveTo((250, 0))
    pen.qCurveTo((50, 0), (50, 350))
    pen.qCurveTo((50, 700), (250, 700))
    pen.qCurveTo((450, 700), (450, 350))
    pen.qCurveTo((450, 0), (250, 0))
    pen.closePath()


def build_test_font(path: Path) -> Path:
    """印字可能 ASCII（0x21..0x7E）を持つ最小の TrueType フォントを書き出す。

    - ほぼ全グリフは「穴あきの箱」。`O` だけ 2 次ベジエの丸。
    - `A`,`V` のペアに GPOS kern（-120）を持つ。
    """
    from fontTools.fontBuilder import FontBuilder
    from fontTools.pens.ttGlyphPen import TTGlyphPen

    codes = list(range(0x21, 0x7F))
    order = [".notdef", "space"] + [_glyph_name(c) for c in codes]
    cmap = {0x20: "space"}
    cmap.update({c: _glyph_name(c) for c in codes})

    glyphs = {}
    metrics = {}
    for name in (".notdef", "space"):
        glyphs[name] = TTGlyphPen(None).glyph()
        metrics[name] = (ADVANCE, 0)
    for c in codes:
        pen = TTGlyphPen(None)
        if c == ord("O"):
            _draw_round(pen)
        else:
            _draw_box_with_hole(pen)
        name = _glyph_name(c)
        glyphs[name] = pen.glyph()
        metrics[name] = (ADVANCE, 50)

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder(order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    fb.setupNameTable({"familyName": "BookmarkTest", "styleName": "Regular"})
    fb.setupOS2(
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
    )
    fb.setupPost()
    fb.addOpenTypeFeatures(
        "languagesystem DFLT dflt;\n"
        f"feature kern {{ pos {_glyph_name(ord('A'))} {_glyph_name(ord('V'))} {KERN_AV}; }} kern;\n"
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path


@pytest.fixture(scope="session")
def test_font_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return build_test_font(tmp_path_factory.mktemp("fonts") / "BookmarkTest-Regular.ttf")


@pytest.fixture(scope="session")
def test_font(test_font_path: Path) -> GlyphFont:
    return load_font(test_font_path)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """config 探索を tmp_path 内に閉じ込める。"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    set_config_path(None)
    yield tmp_path
    set_config_path(None)
