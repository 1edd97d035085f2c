"""
どこで: `src/bookmark_gen/core/shapes.py`。
何を: 図形モードの形状記述子（円・矩形・小矩形・三角形）をノイズ場からサンプルし、塗り輪郭へ変換する。
なぜ: テキストの代わりに、seed から再現できる有機的な配置の図形シルエットを作るため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import shapely.affinity
from shapely.geometry import Point

from .document import FrameRect
from .noise import OrganicSampler, SimplexNoise2D
from .outline import CIRCLE_QUAD_SEGS, Outline, polygon
from .params import BookmarkParams
from .rng import AleaStream

SHAPE_KINDS = ("circle", "rect", "small_rect", "triangle")

# organic01 のチャンネル割り当て。
CHANNEL_X = 1
CHANNEL_Y = 2
CHANNEL_ANGLE = 3
CHANNEL_SIZE = 4


@dataclass(frozen=True, slots=True)
class ShapeDescriptor:
    """1 つの図形の種類・中心・サイズ・回転角（度）。

    size は円と三角形では半径（外接円）、矩形では一辺の長さ。
    """

    kind: str
    center: tuple[float, float]
    size: float
    angle: float


def _kind_settings(params: BookmarkParams) -> list[tuple[str, float, tuple[float, float]]]:
    s = params.shapes
    return [
        ("circle", s.t_circle, s.circle_size),
        ("rect", s.t_rect, s.rect_size),
        ("small_rect", s.t_small_rect, s.small_rect_size),
        ("triangle", s.t_triangle, s.triangle_size),
    ]


def sample_shapes(params: BookmarkParams) -> list[ShapeDescriptor]:
    """パラメータの seed からノイズ場を 1 度だけ作り、4 種の図形記述子を返す。"""
    noise_params = params.shapes.noise
    sampler = OrganicSampler(
        noise=SimplexNoise2D(AleaStream(params.seed)),
        freq=noise_params.freq,
        warp=noise_params.warp,
        channel_spread=noise_params.channel_spread,
    )
    frame = FrameRect.from_params(params)
    x_range = (frame.x, frame.right)
    y_range = (frame.y, frame.bottom)

    out: list[ShapeDescriptor] = []
    for kind, t, (size_min, size_max) in _kind_settings(params):
        center = (
            sampler.between(t, x_range[0], x_range[1], CHANNEL_X),
            sampler.between(t, y_range[0], y_range[1], CHANNEL_Y),
        )
        size = sampler.between(t, size_min, size_max, CHANNEL_SIZE)
        angle = sampler.between(t, noise_params.angle_min, noise_params.angle_max, CHANNEL_ANGLE)
        out.append(ShapeDescriptor(kind=kind, center=center, size=size, angle=angle))
    return out


def shape_outline(shape: ShapeDescriptor) -> Outline | None:
    """記述子を中心周りに回転させた塗り輪郭へ変換して返す。"""
    cx, cy = shape.center
    size = float(shape.size)
    if not size > 0.0:
        return None

    if shape.kind == "circle":
        geom = Point(cx, cy).buffer(size, quad_segs=CIRCLE_QUAD_SEGS)
        base = Outline.from_geometry(geom)
    elif shape.kind in ("rect", "small_rect"):
        h = size / 2.0
        base = polygon([(cx - h, cy - h), (cx + h, cy - h), (cx + h, cy + h), (cx - h, cy + h)])
    elif shape.kind == "triangle":
        # 頂点を真上（y- 方向）から 120° 刻みで置く正三角形。
        pts = [
            (cx + size * math.sin(math.radians(a)), cy - size * math.cos(math.radians(a)))
            for a in (0.0, 120.0, 240.0)
        ]
        base = polygon(pts)
    else:
        raise ValueError(f"未知の図形種別です: {shape.kind!r}")

    if base is None:
        return None
    rotated = shapely.affinity.rotate(base.geometry, float(shape.angle), origin=(cx, cy))
    return Outline.from_geometry(rotated)


__all__ = ["SHAPE_KINDS", "ShapeDescriptor", "sample_shapes", "shape_outline"]
