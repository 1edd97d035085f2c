"""
どこで: `src/bookmark_gen/core/style.py`。
何を: 背景色・塗り色などの色指定を `#RRGGBB` 文字列へ正規化するユーティリティ。
なぜ: パラメータファイル・CLI・API のどこから来た色でも、SVG 出力が決定的な表記になるようにするため。
"""

from __future__ import annotations

import re
from typing import Any, cast

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_NONE_WORDS = {"none", "transparent", ""}


def coerce_rgb255(value: object) -> tuple[int, int, int]:
    """値を RGB255 タプル `(r, g, b)`（0..255）に正規化して返す。

    Raises
    ------
    ValueError
        長さ 3 のシーケンスでない場合。
    """

    try:
        r, g, b = value  # type: ignore[misc]
    except Exception as exc:
        raise ValueError(f"rgb value must be a length-3 sequence: {value!r}") from exc

    def _clamp(v: object) -> int:
        iv = int(cast(Any, v))
        return 0 if iv < 0 else 255 if iv > 255 else iv

    return _clamp(r), _clamp(g), _clamp(b)


def rgb255_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = coerce_rgb255(rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def coerce_color(value: object) -> str:
    """色指定を `#RRGGBB` 文字列にして返す。

    Parameters
    ----------
    value : object
        `"#rgb"` / `"#rrggbb"`（`#` 省略可）または `(r, g, b)`（0..255）。

    Raises
    ------
    ValueError
        解釈できない色指定の場合。
    """

    if isinstance(value, str):
        m = _HEX_RE.match(value.strip())
        if m is None:
            raise ValueError(f"色指定を解釈できません: {value!r}")
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return f"#{digits.upper()}"
    return rgb255_to_hex(coerce_rgb255(value))


def coerce_optional_color(value: object) -> str | None:
    """`None` / `"none"` を「描画しない」として許容する版の `coerce_color`。"""

    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _NONE_WORDS:
        return None
    return coerce_color(value)


__all__ = ["coerce_color", "coerce_optional_color", "coerce_rgb255", "rgb255_to_hex"]
