"""
どこで: `src/bookmark_gen/core/params.py`。
何を: 1 回の描画パスに渡す不変パラメータセットと、その検証・正規化・mapping からの構築を提供する。
なぜ: 全ステージが共有するグローバル可変オブジェクトを排し、明示的な値として描画パイプラインへ通すため。
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .rng import random_seed
from .style import coerce_color, coerce_optional_color

_logger = logging.getLogger(__name__)

MODES = ("text", "shape")
MAX_PRECISION = 6


class ParameterError(ValueError):
    """クランプで救えないパラメータ不正。"""


@dataclass(frozen=True, slots=True)
class Margins:
    """フレーム（安全領域）を決める 4 辺の余白。"""

    top: float = 2.0
    right: float = 2.0
    bottom: float = 18.0
    left: float = 2.0


@dataclass(frozen=True, slots=True)
class TextParams:
    """テキスト（フェイクコード）モードのパラメータ。

    Notes
    -----
    `header` の各行は `{seed}` を seed に置き換えてから生成行の前に置かれる。
    """

    line_count: int = 56
    font_size: float = 3.0
    line_factor: float = 1.2
    precision: int = 2
    kerning: bool = True
    fill_rule: str = "nonzero"
    header: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class NoiseParams:
    freq: float = 0.5
    warp: float = 1.0
    channel_spread: float = 1000.0
    angle_min: float = -180.0
    angle_max: float = 180.0


@dataclass(frozen=True, slots=True)
class ShapeParams:
    """図形モードのパラメータ（サイズ範囲と、ノイズ場上のサンプル位置 t）。"""

    circle_size: tuple[float, float] = (10.0, 30.0)
    rect_size: tuple[float, float] = (40.0, 50.0)
    small_rect_size: tuple[float, float] = (10.0, 15.0)
    triangle_size: tuple[float, float] = (30.0, 40.0)
    t_circle: float = 0.0
    t_rect: float = 50.0
    t_small_rect: float = 100.0
    t_triangle: float = 150.0
    noise: NoiseParams = field(default_factory=NoiseParams)


@dataclass(frozen=True, slots=True)
class StyleParams:
    background_color: str | None = "#F5F5F5"
    fill_color: str = "#151515"


@dataclass(frozen=True, slots=True)
class BookmarkParams:
    """描画 1 回分のパラメータスナップショット。

    Parameters
    ----------
    seed : str
        乱数 seed。空文字なら `normalize_params` が自動生成する。
    mode : str
        `"text"`（フェイクコード）または `"shape"`（有機図形）。
    width, height : float
        キャンバス寸法。mm と viewBox 単位を兼ねる。
    clip_to_frame : bool
        True のとき結合後の輪郭をフレームで切り抜く。
    show_debug_frame : bool
        True のときフレームを破線で出力に残す。
    """

    seed: str = ""
    mode: str = "text"
    width: float = 48.0
    height: float = 164.0
    margins: Margins = field(default_factory=Margins)
    text: TextParams = field(default_factory=TextParams)
    shapes: ShapeParams = field(default_factory=ShapeParams)
    style: StyleParams = field(default_factory=StyleParams)
    clip_to_frame: bool = True
    show_debug_frame: bool = False

    @property
    def drawable_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def drawable_height(self) -> float:
        return self.height - self.margins.top - self.margins.bottom


def _ordered(pair: tuple[float, float], *, key: str) -> tuple[float, float]:
    try:
        a, b = pair
    except Exception as exc:
        raise ParameterError(f"{key} は (min, max) の 2 要素である必要があります: got={pair!r}") from exc
    lo, hi = _as_float(a, key=key), _as_float(b, key=key)
    if lo > hi:
        _logger.warning("%s の min/max が逆転していたため入れ替えます: %r", key, pair)
        lo, hi = hi, lo
    return lo, hi


def _as_float(value: Any, *, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ParameterError(f"{key} は数値である必要があります: got={value!r}") from exc


def _as_int(value: Any, *, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ParameterError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_color(value: Any, *, key: str, optional: bool = False) -> str | None:
    try:
        return coerce_optional_color(value) if optional else coerce_color(value)
    except (TypeError, ValueError) as exc:
        raise ParameterError(f"{key}: {exc}") from exc


def _fit_margins(low: float, high: float, extent: float, *, axis: str) -> tuple[float, float]:
    """余白の和がキャンバスを食い潰すなら、比率を保って縮めて返す。"""
    total = low + high
    if total < extent:
        return low, high
    _logger.warning(
        "%s 方向の余白 (%g + %g) がキャンバス (%g) 以上のため縮小します", axis, low, high, extent
    )
    if total <= 0.0:
        return 0.0, 0.0
    # 描画可能域として 1% を残す。
    scale = (extent * 0.99) / total
    return low * scale, high * scale


def normalize_params(params: BookmarkParams) -> BookmarkParams:
    """検証・クランプ済みのパラメータを新しいインスタンスとして返す。

    Raises
    ------
    ParameterError
        キャンバス寸法・フォントサイズ・行送り係数が正でない場合や、モードが未知の場合。
    """

    width = _as_float(params.width, key="width")
    height = _as_float(params.height, key="height")
    if not (width > 0.0 and height > 0.0):
        raise ParameterError(f"キャンバス寸法は正である必要があります: width={width}, height={height}")

    mode = str(params.mode).strip().lower()
    if mode not in MODES:
        raise ParameterError(f"未知のモードです: {params.mode!r}（{'|'.join(MODES)}）")

    seed = str(params.seed).strip()
    if not seed:
        seed = random_seed()
        _logger.info("seed が空のため生成しました: %s", seed)

    m = params.margins
    top, right, bottom, left = (
        max(0.0, _as_float(getattr(m, side), key=f"margins.{side}"))
        for side in ("top", "right", "bottom", "left")
    )
    if (top, right, bottom, left) != (m.top, m.right, m.bottom, m.left):
        _logger.warning("負の余白を 0 にクランプしました: %r", m)
    left, right = _fit_margins(left, right, width, axis="横")
    top, bottom = _fit_margins(top, bottom, height, axis="縦")

    t = params.text
    font_size = _as_float(t.font_size, key="text.font_size")
    line_factor = _as_float(t.line_factor, key="text.line_factor")
    if not font_size > 0.0:
        raise ParameterError(f"font_size は正である必要があります: got={font_size}")
    if not line_factor > 0.0:
        raise ParameterError(f"line_factor は正である必要があります: got={line_factor}")
    fill_rule = str(t.fill_rule).strip().lower()
    if fill_rule not in {"nonzero", "evenodd"}:
        raise ParameterError(f"fill_rule は nonzero|evenodd のいずれかです: got={t.fill_rule!r}")
    precision = min(MAX_PRECISION, max(0, _as_int(t.precision, key="text.precision")))
    line_count = max(0, _as_int(t.line_count, key="text.line_count"))
    text = TextParams(
        line_count=line_count,
        font_size=font_size,
        line_factor=line_factor,
        precision=precision,
        kerning=bool(t.kerning),
        fill_rule=fill_rule,
        header=tuple(str(h) for h in t.header),
    )

    s = params.shapes
    n = s.noise
    angle_min, angle_max = _ordered((n.angle_min, n.angle_max), key="angle")
    shapes = ShapeParams(
        circle_size=_ordered(s.circle_size, key="circle_size"),
        rect_size=_ordered(s.rect_size, key="rect_size"),
        small_rect_size=_ordered(s.small_rect_size, key="small_rect_size"),
        triangle_size=_ordered(s.triangle_size, key="triangle_size"),
        t_circle=_as_float(s.t_circle, key="shapes.t_circle"),
        t_rect=_as_float(s.t_rect, key="shapes.t_rect"),
        t_small_rect=_as_float(s.t_small_rect, key="shapes.t_small_rect"),
        t_triangle=_as_float(s.t_triangle, key="shapes.t_triangle"),
        noise=NoiseParams(
            freq=_as_float(n.freq, key="shapes.noise.freq"),
            warp=_as_float(n.warp, key="shapes.noise.warp"),
            channel_spread=_as_float(n.channel_spread, key="shapes.noise.channel_spread"),
            angle_min=angle_min,
            angle_max=angle_max,
        ),
    )

    style = StyleParams(
        background_color=_as_color(params.style.background_color, key="style.background_color", optional=True),
        fill_color=_as_color(params.style.fill_color, key="style.fill_color"),  # type: ignore[arg-type]
    )

    return BookmarkParams(
        seed=seed,
        mode=mode,
        width=width,
        height=height,
        margins=Margins(top=top, right=right, bottom=bottom, left=left),
        text=text,
        shapes=shapes,
        style=style,
        clip_to_frame=bool(params.clip_to_frame),
        show_debug_frame=bool(params.show_debug_frame),
    )


_NESTED = {
    "margins": Margins,
    "text": TextParams,
    "shapes": ShapeParams,
    "style": StyleParams,
}


def _build(cls: type, payload: Mapping[str, Any], *, key: str) -> Any:
    if not isinstance(payload, Mapping):
        raise ParameterError(f"{key} は mapping である必要があります: got={payload!r}")
    names = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(payload) - names)
    if unknown:
        raise ParameterError(f"{key} に未知のキーがあります: {unknown}")

    kwargs: dict[str, Any] = {}
    for name, value in payload.items():
        if cls is ShapeParams and name == "noise":
            kwargs[name] = _build(NoiseParams, value, key=f"{key}.noise")
        elif cls is BookmarkParams and name in _NESTED:
            kwargs[name] = _build(_NESTED[name], value, key=name)
        elif name == "header":
            kwargs[name] = tuple(str(v) for v in value) if isinstance(value, (list, tuple)) else (str(value),)
        elif name.endswith("_size") and cls is ShapeParams:
            try:
                kwargs[name] = tuple(float(v) for v in value)
            except (TypeError, ValueError) as exc:
                raise ParameterError(f"{key}.{name} は数値の組である必要があります: got={value!r}") from exc
        else:
            kwargs[name] = value
    return cls(**kwargs)


def params_from_mapping(payload: Mapping[str, Any] | None) -> BookmarkParams:
    """入れ子の mapping（YAML のロード結果など）から `BookmarkParams` を構築して返す。

    未知のキーは黙って捨てずに `ParameterError` とする。
    """

    if payload is None:
        return BookmarkParams()
    return _build(BookmarkParams, payload, key="params")


__all__ = [
    "BookmarkParams",
    "MODES",
    "Margins",
    "NoiseParams",
    "ParameterError",
    "ShapeParams",
    "StyleParams",
    "TextParams",
    "normalize_params",
    "params_from_mapping",
]
