"""
どこで: `src/bookmark_gen/core/noise.py`。
何を: seed 付き 2D simplex ノイズと、ドメインワープ付きの「有機的な」0..1 サンプラを提供する。
なぜ: 図形モードの位置・サイズ・角度を、独立乱数ではなく連続なノイズ場から取り出すため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .rng import AleaStream

_F2 = 0.5 * (math.sqrt(3.0) - 1.0)
_G2 = (3.0 - math.sqrt(3.0)) / 6.0

# simplex ノイズ用の 12 方向勾配（x, y の交互配置）。
_GRAD2 = np.array(
    [1, 1, -1, 1, 1, -1, -1, -1, 1, 0, -1, 0, 1, 0, -1, 0, 0, 1, 0, -1, 0, 1, 0, -1],
    dtype=np.float64,
)

# ワープ用サンプルを本体サンプルからずらすための固定オフセット。
WARP_OFFSET_X = 12.3
WARP_OFFSET_Y = 45.6


def build_permutation_table(stream: AleaStream) -> np.ndarray:
    """乱数ストリームから 512 要素の置換テーブルを作って返す（255 回ドローを消費する）。"""
    p = np.zeros((512,), dtype=np.int64)
    p[:256] = np.arange(256, dtype=np.int64)
    for i in range(255):
        r = i + int(stream.next_float() * (256 - i))
        p[i], p[r] = p[r], p[i]
    p[256:] = p[:256]
    return p


class SimplexNoise2D:
    """2D simplex ノイズ関数（出力はおおよそ [-1, 1]）。"""

    def __init__(self, stream: AleaStream) -> None:
        perm = build_permutation_table(stream)
        self._perm = [int(v) for v in perm]
        idx = perm % 12
        self._grad_x = [float(v) for v in _GRAD2[idx * 2]]
        self._grad_y = [float(v) for v in _GRAD2[idx * 2 + 1]]

    @classmethod
    def from_seed(cls, seed: str) -> "SimplexNoise2D":
        return cls(AleaStream(seed))

    def __call__(self, x: float, y: float) -> float:
        perm = self._perm
        gx = self._grad_x
        gy = self._grad_y

        s = (x + y) * _F2
        i = math.floor(x + s)
        j = math.floor(y + s)
        t = (i + j) * _G2
        x0 = x - (i - t)
        y0 = y - (j - t)
        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1
        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1.0 + 2.0 * _G2
        y2 = y0 - 1.0 + 2.0 * _G2
        ii = i & 255
        jj = j & 255

        n0 = n1 = n2 = 0.0
        t0 = 0.5 - x0 * x0 - y0 * y0
        if t0 >= 0:
            g = ii + perm[jj]
            t0 *= t0
            n0 = t0 * t0 * (gx[g] * x0 + gy[g] * y0)
        t1 = 0.5 - x1 * x1 - y1 * y1
        if t1 >= 0:
            g = ii + i1 + perm[jj + j1]
            t1 *= t1
            n1 = t1 * t1 * (gx[g] * x1 + gy[g] * y1)
        t2 = 0.5 - x2 * x2 - y2 * y2
        if t2 >= 0:
            g = ii + 1 + perm[jj + 1]
            t2 *= t2
            n2 = t2 * t2 * (gx[g] * x2 + gy[g] * y2)
        return 70.0 * (n0 + n1 + n2)


def clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass(frozen=True, slots=True)
class OrganicSampler:
    """ドメインワープ付きでノイズ場をサンプルし、0..1 や任意レンジの値を返す。

    Parameters
    ----------
    noise : SimplexNoise2D
        描画パスごとに 1 度だけ構築したノイズ関数。
    freq : float
        t 軸方向の周波数。
    warp : float
        ワープ量。0 でワープ無し。
    channel_spread : float
        チャンネル間の y 方向距離。大きいほどチャンネル同士が無相関になる。
    """

    noise: SimplexNoise2D
    freq: float = 0.5
    warp: float = 1.0
    channel_spread: float = 1000.0

    def n01(self, x: float, y: float) -> float:
        return (self.noise(x, y) + 1.0) / 2.0

    def organic01(self, t: float, channel: int = 0) -> float:
        """サンプル座標 t・チャンネル channel のノイズ値を [0, 1] で返す。"""
        x = float(t) * float(self.freq)
        y = float(channel) * float(self.channel_spread)
        w = self.n01(x + WARP_OFFSET_X, y + WARP_OFFSET_Y) * 2.0 - 1.0
        warp = w * float(self.warp)
        return clamp(self.n01(x + warp, y + warp), 0.0, 1.0)

    def between(self, t: float, lo: float, hi: float, channel: int = 0) -> float:
        return lerp(float(lo), float(hi), self.organic01(t, channel))


__all__ = [
    "OrganicSampler",
    "SimplexNoise2D",
    "build_permutation_table",
    "clamp",
    "lerp",
]
