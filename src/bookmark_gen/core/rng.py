"""
どこで: `src/bookmark_gen/core/rng.py`。
何を: 文字列 seed から決定的な乱数列を生成する Alea ストリームと、その派生ヘルパを提供する。
なぜ: (seed, パラメータ) だけで出力 SVG を完全に再現できるようにし、ブラウザ版スケッチと同じ乱数列を得るため。
"""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

SEED_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz"
DEFAULT_SEED_LENGTH = 14

_TWO_POW_32 = 4294967296.0
_TWO_POW_MINUS_32 = 2.3283064365386963e-10


class _Mash:
    """Alea の初期状態を作る文字列ハッシュ。"""

    def __init__(self) -> None:
        self._n = float(0xEFC8249D)

    def __call__(self, data: str) -> float:
        n = self._n
        # JS の charCodeAt と同じく UTF-16 コードユニット単位で畳み込む。
        raw = str(data).encode("utf-16-le")
        for i in range(0, len(raw), 2):
            n += raw[i] | (raw[i + 1] << 8)
            h = 0.02519603282416938 * n
            n = float(int(h) % 0x100000000)
            h -= n
            h *= n
            n = float(int(h) % 0x100000000)
            h -= n
            n += h * _TWO_POW_32
        self._n = n
        return float(int(n) % 0x100000000) * _TWO_POW_MINUS_32


class AleaStream:
    """seed 文字列から初期化される Alea 乱数ストリーム。

    Parameters
    ----------
    seed : str
        乱数列を決める seed。同じ seed は常に同じ乱数列を返す。

    Notes
    -----
    `next_float()` を呼ぶたびに内部状態が進む。1 回の描画パス全体で同じストリームを使い回す。
    """

    __slots__ = ("seed", "_s0", "_s1", "_s2", "_c")

    def __init__(self, seed: str) -> None:
        self.seed = str(seed)
        mash = _Mash()
        s0 = mash(" ")
        s1 = mash(" ")
        s2 = mash(" ")
        s0 -= mash(self.seed)
        if s0 < 0:
            s0 += 1
        s1 -= mash(self.seed)
        if s1 < 0:
            s1 += 1
        s2 -= mash(self.seed)
        if s2 < 0:
            s2 += 1
        self._s0 = s0
        self._s1 = s1
        self._s2 = s2
        self._c = 1

    def next_float(self) -> float:
        """[0, 1) の float を 1 つ返し、状態を進める。"""
        t = 2091639 * self._s0 + self._c * _TWO_POW_MINUS_32
        self._s0 = self._s1
        self._s1 = self._s2
        self._c = int(t)
        self._s2 = t - self._c
        return self._s2

    __call__ = next_float


def random_int(stream: AleaStream, min_value: int, max_value: int) -> int:
    """両端を含む [min_value, max_value] の整数を返す。"""
    lo = int(min_value)
    hi = int(max_value)
    return int(stream.next_float() * (hi - lo + 1)) + lo


def choice(stream: AleaStream, seq: Sequence[T]) -> T:
    """シーケンスから一様に 1 要素を選んで返す。"""
    if not seq:
        raise ValueError("choice の対象シーケンスが空です")
    return seq[random_int(stream, 0, len(seq) - 1)]


def weighted_bool(stream: AleaStream, p: float) -> bool:
    """確率 p で True を返す。"""
    return stream.next_float() < float(p)


def random_seed(length: int = DEFAULT_SEED_LENGTH) -> str:
    """紛らわしい文字を除いた英数字から、読みやすい seed を生成して返す。"""
    n = max(1, int(length))
    return "".join(secrets.choice(SEED_ALPHABET) for _ in range(n))


__all__ = [
    "AleaStream",
    "DEFAULT_SEED_LENGTH",
    "SEED_ALPHABET",
    "choice",
    "random_int",
    "random_seed",
    "weighted_bool",
]
