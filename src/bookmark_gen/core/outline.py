"""
どこで: `src/bookmark_gen/core/outline.py`。
何を: 塗り輪郭 `Outline`（Shapely の面ジオメトリ）と、その union / intersect / 面積などのブーリアン合成を提供する。
なぜ: グリフ輪郭や図形を 1 枚のシルエットへ結合し、フレームで切り抜く処理を 1 箇所にまとめるため。

許容誤差に関わる定数はすべてこのモジュールに置く。
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

import numpy as np
import shapely
from shapely.geometry import MultiPolygon, Polygon, box
from shapely.geometry.base import BaseGeometry

_logger = logging.getLogger(__name__)

# ブーリアン演算の座標スナップ格子（文書単位 = mm）。
BOOLEAN_GRID_SIZE = 1e-5
# これ未満の面積しか持たない多角形は sliver とみなして捨てる。
MIN_POLYGON_AREA = 1e-8
# 曲線平坦化のセグメント長（em 比）。フォントサイズを掛けて文書単位にする。
CURVE_SEGMENT_EM = 0.02
# 円を近似する際の 1/4 円あたりの分割数。
CIRCLE_QUAD_SEGS = 32


def _polygonal_parts(geom: BaseGeometry) -> list[Polygon]:
    """ジオメトリから面積を持つ Polygon だけを取り出して返す。"""
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    parts: list[Polygon] = []
    for sub in getattr(geom, "geoms", ()):
        parts.extend(_polygonal_parts(sub))
    return parts


def sanitize(geom: BaseGeometry | None) -> BaseGeometry | None:
    """不正・退化したジオメトリを修復し、描画できる面が無ければ None を返す。"""
    if geom is None or geom.is_empty:
        return None
    coords = shapely.get_coordinates(geom)
    if coords.size == 0 or not bool(np.all(np.isfinite(coords))):
        _logger.warning("非有限の座標を含む輪郭を捨てました")
        return None
    if not geom.is_valid:
        geom = shapely.make_valid(geom)
    polys = [p for p in _polygonal_parts(geom) if p.area >= MIN_POLYGON_AREA]
    if not polys:
        return None
    if len(polys) == 1:
        return polys[0]
    return MultiPolygon(polys)


@dataclass(frozen=True, slots=True)
class Outline:
    """閉じた塗り輪郭（穴を持つ複数輪郭を含む）。

    Parameters
    ----------
    geometry : BaseGeometry
        `Polygon` または `MultiPolygon`。空であってはならない。

    Notes
    -----
    空の結果は `Outline` ではなく None（「形状なし」状態）で表す。
    """

    geometry: BaseGeometry

    def __post_init__(self) -> None:
        if not isinstance(self.geometry, (Polygon, MultiPolygon)):
            raise TypeError(f"Outline は面ジオメトリのみ保持できます: got={type(self.geometry).__name__}")
        if self.geometry.is_empty:
            raise ValueError("空の Outline は作れません（None を使う）")

    @classmethod
    def from_geometry(cls, geom: BaseGeometry | None) -> "Outline | None":
        """修復したうえで Outline を返す。描画可能な面が無ければ None。"""
        fixed = sanitize(geom)
        if fixed is None:
            return None
        return cls(fixed)

    @property
    def area(self) -> float:
        return float(self.geometry.area)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        minx, miny, maxx, maxy = self.geometry.bounds
        return float(minx), float(miny), float(maxx), float(maxy)

    def union(self, other: "Outline") -> "Outline | None":
        merged = shapely.union(self.geometry, other.geometry, grid_size=BOOLEAN_GRID_SIZE)
        return Outline.from_geometry(merged)

    def intersect(self, other: "Outline") -> "Outline | None":
        clipped = shapely.intersection(self.geometry, other.geometry, grid_size=BOOLEAN_GRID_SIZE)
        return Outline.from_geometry(clipped)

    def contains(self, other: "Outline") -> bool:
        return bool(self.geometry.buffer(BOOLEAN_GRID_SIZE).contains(other.geometry))

    def contours(self) -> Iterator[np.ndarray]:
        """外周・穴の順に、閉じた輪郭点列（shape (N,2)、終点=始点）を列挙する。"""
        for poly in _polygonal_parts(self.geometry):
            yield np.asarray(poly.exterior.coords, dtype=np.float64)
            for ring in poly.interiors:
                yield np.asarray(ring.coords, dtype=np.float64)

    def to_path_data(self, *, decimals: int = 3) -> str:
        """SVG path の d 属性文字列を返す（even-odd 塗りで穴が抜ける向き）。"""
        parts: list[str] = []
        for ring in self.contours():
            pts = ring[:-1] if ring.shape[0] > 1 and np.allclose(ring[0], ring[-1]) else ring
            if pts.shape[0] < 3:
                continue
            cmds = [f"M {fmt_number(pts[0, 0], decimals)} {fmt_number(pts[0, 1], decimals)}"]
            for x, y in pts[1:]:
                cmds.append(f"L {fmt_number(x, decimals)} {fmt_number(y, decimals)}")
            cmds.append("Z")
            parts.append(" ".join(cmds))
        return " ".join(parts)


def fmt_number(value: float, decimals: int = 3) -> str:
    """SVG 出力向けに float を決定的な文字列へ変換して返す。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-0") and float(text) == 0.0:
        return text[1:]
    return text


def rectangle(x: float, y: float, width: float, height: float) -> Outline | None:
    """左上 (x, y) と寸法から矩形 Outline を返す。寸法が正でなければ None。"""
    if not (width > 0.0 and height > 0.0):
        return None
    return Outline.from_geometry(box(float(x), float(y), float(x) + float(width), float(y) + float(height)))


def polygon(points: Sequence[tuple[float, float]] | np.ndarray) -> Outline | None:
    """頂点列から多角形 Outline を返す。自己交差は修復される。"""
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[0] < 3:
        return None
    return Outline.from_geometry(Polygon(pts[:, :2]))


def union_all(outlines: Iterable[Outline | None]) -> Outline | None:
    """輪郭列を先頭から順に累積 union して返す。入力が無ければ None。

    Notes
    -----
    同時に保持するのは累積結果と次の 1 つだけ。生成順に処理して数値誤差の出方を再現可能にする。
    """
    acc: Outline | None = None
    for item in outlines:
        if item is None:
            continue
        if acc is None:
            acc = item
            continue
        merged = acc.union(item)
        acc = merged if merged is not None else acc
    return acc


def intersect(a: Outline | None, b: Outline | None) -> Outline | None:
    """2 つの輪郭の共通部分を返す。どちらかが None なら None。"""
    if a is None or b is None:
        return None
    return a.intersect(b)


def rings_to_outline(rings: Sequence[np.ndarray], *, fill_rule: str = "nonzero") -> Outline | None:
    """閉輪郭の点列群を、塗り規則に従って 1 つの Outline へまとめて返す。

    Parameters
    ----------
    rings : Sequence[np.ndarray]
        shape (N,2) の閉輪郭列。向き（時計回り/反時計回り）を保っていること。
    fill_rule : str
        `"nonzero"` は面積の大きい順に、主たる向きの輪郭を union、逆向きの輪郭を差し引く。
        `"evenodd"` は全輪郭の対称差を取る。
    """
    polys: list[tuple[float, Polygon]] = []
    for ring in rings:
        pts = np.asarray(ring, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[0] < 3:
            continue
        signed = _signed_area(pts)
        if not math.isfinite(signed) or abs(signed) < MIN_POLYGON_AREA:
            continue
        poly = sanitize(Polygon(pts[:, :2]))
        if poly is None:
            continue
        polys.append((signed, poly))

    if not polys:
        return None

    if fill_rule == "evenodd":
        acc = polys[0][1]
        for _signed, poly in polys[1:]:
            acc = shapely.symmetric_difference(acc, poly, grid_size=BOOLEAN_GRID_SIZE)
        return Outline.from_geometry(acc)

    # 大きい輪郭から順に足し引きすると、穴の中の島（入れ子）も正しく残る。
    polys.sort(key=lambda item: abs(item[0]), reverse=True)
    dominant = polys[0][0] > 0.0
    body: BaseGeometry = polys[0][1]
    for signed, poly in polys[1:]:
        if (signed > 0.0) == dominant:
            body = shapely.union(body, poly, grid_size=BOOLEAN_GRID_SIZE)
        else:
            body = shapely.difference(body, poly, grid_size=BOOLEAN_GRID_SIZE)
    return Outline.from_geometry(body)


def _signed_area(pts: np.ndarray) -> float:
    x = pts[:, 0]
    y = pts[:, 1]
    return float(0.5 * (np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


__all__ = [
    "BOOLEAN_GRID_SIZE",
    "CIRCLE_QUAD_SEGS",
    "CURVE_SEGMENT_EM",
    "MIN_POLYGON_AREA",
    "Outline",
    "fmt_number",
    "intersect",
    "polygon",
    "rectangle",
    "rings_to_outline",
    "sanitize",
    "union_all",
]
