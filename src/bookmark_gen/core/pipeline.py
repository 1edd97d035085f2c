"""
どこで: `src/bookmark_gen/core/pipeline.py`。
何を: パラメータ 1 セットから完成文書を作る描画パス（生成 → 配置 → 輪郭化 → union → intersect → 組み立て）。
なぜ: 各ステージを明示的な値の受け渡しでつなぎ、同じ (seed, パラメータ) から常に同じ文書を得るため。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .content import generate_code_lines, header_lines
from .document import BookmarkDocument, FrameRect, assemble_document
from .glyphs import GlyphFont
from .layout import TextLayout, layout_lines
from .outline import Outline, rectangle, union_all
from .params import BookmarkParams, normalize_params
from .rng import AleaStream
from .shapes import sample_shapes, shape_outline

_logger = logging.getLogger(__name__)


def text_lines(params: BookmarkParams) -> list[str]:
    """見出し行と、seed から生成したフェイクコード行を順に並べて返す。"""
    stream = AleaStream(params.seed)
    head = header_lines(params.text.header, seed=params.seed)
    return head + generate_code_lines(stream, params.text.line_count)


def text_layout(params: BookmarkParams, font: GlyphFont) -> TextLayout:
    t = params.text
    return layout_lines(
        text_lines(params),
        font.metrics,
        font_size=t.font_size,
        line_factor=t.line_factor,
        left=params.margins.left,
        top=params.margins.top,
        bottom_limit=params.height - params.margins.bottom,
    )


def _text_outlines(params: BookmarkParams, font: GlyphFont, layout: TextLayout) -> Iterator[Outline | None]:
    t = params.text
    for placed in layout.lines:
        yield font.line_outline(
            placed.text,
            x=placed.x,
            y=placed.y,
            font_size=t.font_size,
            precision=t.precision,
            kerning=t.kerning,
            fill_rule=t.fill_rule,
        )


def render(params: BookmarkParams, font: GlyphFont | None = None) -> BookmarkDocument:
    """1 回分の描画パスを実行し、新しい文書を返す。

    Parameters
    ----------
    params : BookmarkParams
        パラメータスナップショット。内部で `normalize_params` を通す。
    font : GlyphFont or None
        テキストモードで使うロード済みフォント。図形モードでは不要。

    Returns
    -------
    BookmarkDocument
        完成文書。輪郭が得られなければ `outline=None`（背景とデバッグ枠だけ）。

    Raises
    ------
    ParameterError
        パラメータがクランプで救えない場合。
    ValueError
        テキストモードで font が None の場合。
    """
    p = normalize_params(params)
    frame = FrameRect.from_params(p)

    if p.mode == "text":
        if font is None:
            raise ValueError("テキストモードには font が必要です（load_font で読み込む）")
        layout = text_layout(p, font)
        merged = union_all(_text_outlines(p, font, layout))
        count = len(layout)
    else:
        shapes = sample_shapes(p)
        merged = union_all(shape_outline(s) for s in shapes)
        count = len(shapes)

    if merged is None:
        _logger.debug("render: no shape (seed=%s, mode=%s)", p.seed, p.mode)
    elif p.clip_to_frame:
        frame_outline = rectangle(frame.x, frame.y, frame.width, frame.height)
        merged = merged.intersect(frame_outline) if frame_outline is not None else None

    return assemble_document(p, merged, frame, line_count=count)


__all__ = ["render", "text_layout", "text_lines"]
