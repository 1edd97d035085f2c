"""
どこで: `src/bookmark_gen/export/svg.py`。
何を: 完成文書 `BookmarkDocument` を SVG 文字列へ直列化し、ファイルとして保存する関数を提供する。
なぜ: 同じ文書からは常にバイト単位で同じ SVG が得られる、決定的な出力経路を用意するため。
"""

from __future__ import annotations

import logging
from pathlib import Path

from bookmark_gen.core.document import BookmarkDocument
from bookmark_gen.core.outline import fmt_number

_logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"
_FLOAT_DECIMALS = 3
_DEBUG_STROKE = "#FF00FF"
_DEBUG_STROKE_WIDTH = 0.25
_DEBUG_DASH = "2 2"


def _fmt(value: float, *, decimals: int = _FLOAT_DECIMALS) -> str:
    return fmt_number(value, decimals)


def _size(value: float) -> str:
    """寸法属性用。整数値なら小数点を付けず、小さな値も有効数字を残す。"""
    v = float(value)
    if v.is_integer():
        return str(int(v))
    return format(v, ".10g")


def document_to_svg(document: BookmarkDocument, *, decimals: int = _FLOAT_DECIMALS) -> str:
    """文書を SVG 文字列に変換して返す。

    Parameters
    ----------
    document : BookmarkDocument
        描画パスの結果。
    decimals : int
        パスデータの小数桁。

    Returns
    -------
    str
        `<?xml ...?>` から始まる SVG 文書（末尾改行付き）。

    Notes
    -----
    出力要素は最大で「背景矩形 1・合成輪郭 1・デバッグ枠 1」。
    """
    w = _size(document.width)
    h = _size(document.height)

    lines: list[str] = []
    lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        f'<svg xmlns="{_SVG_NS}" id="bookmark" width="{w}mm" height="{h}mm" viewBox="0 0 {w} {h}">'
    )

    if document.background_color is not None:
        lines.append(
            f'  <rect x="0" y="0" width="{w}" height="{h}" fill="{document.background_color}" stroke="none" />'
        )

    if document.outline is not None:
        d = document.outline.to_path_data(decimals=decimals)
        if d:
            lines.append(
                f'  <path d="{d}" fill="{document.fill_color}" fill-rule="evenodd" stroke="none" />'
            )

    frame = document.debug_frame
    if frame is not None:
        lines.append(
            (
                f'  <rect x="{_fmt(frame.x)}" y="{_fmt(frame.y)}" '
                f'width="{_fmt(frame.width)}" height="{_fmt(frame.height)}" '
                f'fill="none" stroke="{_DEBUG_STROKE}" stroke-width="{_fmt(_DEBUG_STROKE_WIDTH)}" '
                f'stroke-dasharray="{_DEBUG_DASH}" />'
            )
        )

    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def export_svg(document: BookmarkDocument, path: str | Path) -> Path:
    """文書を SVG として保存し、保存先パスを返す（親ディレクトリは作成する）。"""
    _path = Path(path)
    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(document_to_svg(document))
    _logger.info("Wrote SVG: %s", _path)
    return _path


__all__ = ["document_to_svg", "export_svg"]
