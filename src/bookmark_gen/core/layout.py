"""
どこで: `src/bookmark_gen/core/layout.py`。
何を: テキスト行をフォントメトリクスと行送り係数で縦に並べ、下余白を越える行を切り捨てる。
なぜ: 生成器に要求した行数がフレームに収まらない場合でも、収まる分だけを確実に配置するため。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .glyphs import FontMetrics

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlacedLine:
    """配置済みの 1 行（x, y はベースライン原点）。"""

    text: str
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class TextLayout:
    lines: tuple[PlacedLine, ...]
    line_height: float
    dropped: int

    def __len__(self) -> int:
        return len(self.lines)


def compute_line_height(metrics: FontMetrics, font_size: float, line_factor: float) -> float:
    """(ascender - descender) / unitsPerEm * font_size * line_factor を返す。"""
    return (
        (metrics.ascender - metrics.descender)
        / metrics.units_per_em
        * float(font_size)
        * float(line_factor)
    )


def layout_lines(
    lines: Sequence[str],
    metrics: FontMetrics,
    *,
    font_size: float,
    line_factor: float,
    left: float,
    top: float,
    bottom_limit: float,
) -> TextLayout:
    """行列をベースラインに沿って配置する。

    Parameters
    ----------
    lines : Sequence[str]
        上から順に並べる行。
    metrics : FontMetrics
        フォントの縦メトリクス。
    font_size, line_factor : float
        em の大きさと行送り係数。
    left, top : float
        左余白と上余白。1 行目のベースラインは `top + ascender_offset`。
    bottom_limit : float
        ディセンダが越えてはならない y（`height - bottom_margin`）。

    Returns
    -------
    TextLayout
        配置済み行、行送り、切り捨てた行数。

    Notes
    -----
    各行は配置前に `baseline + descender_offset <= bottom_limit` を確認する。
    収まらない行が出た時点で、その行と以降の行をすべて捨てる（エラーではない）。
    """
    line_height = compute_line_height(metrics, font_size, line_factor)
    descender_offset = metrics.descender_offset(font_size)
    y = float(top) + metrics.ascender_offset(font_size)

    placed: list[PlacedLine] = []
    for text in lines:
        if y + descender_offset > float(bottom_limit):
            break
        placed.append(PlacedLine(text=str(text), x=float(left), y=y))
        y += line_height

    dropped = len(lines) - len(placed)
    if dropped:
        _logger.debug(
            "layout: %d/%d lines placed, %d dropped (line_height=%.4f)",
            len(placed),
            len(lines),
            dropped,
            line_height,
        )
    return TextLayout(lines=tuple(placed), line_height=line_height, dropped=dropped)


__all__ = ["PlacedLine", "TextLayout", "compute_line_height", "layout_lines"]
