"""
どこで: `src/bookmark_gen/core/glyphs.py`。グリフ輪郭抽出の実体。
何を: fontTools でフォントを読み、1 行分の文字列をカーニング込みで配置した塗り輪郭 `Outline` に変換する。
なぜ: テキスト行をベクタの塗り形状として扱い、後段の union / intersect に渡せるようにするため。
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from bookmark_gen.core.font_resolver import resolve_font_path
from bookmark_gen.core.outline import CURVE_SEGMENT_EM, Outline, rings_to_outline

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FontMetrics:
    """行送り計算に使うフォントの縦方向メトリクス（フォント単位）。"""

    ascender: float
    descender: float
    units_per_em: float

    def ascender_offset(self, font_size: float) -> float:
        """ベースラインからアセンダまでの距離（文書単位）。"""
        return self.ascender / self.units_per_em * float(font_size)

    def descender_offset(self, font_size: float) -> float:
        """ベースラインからディセンダまでの符号付き距離（通常は負）。"""
        return self.descender / self.units_per_em * float(font_size)


class _LRU:
    """単純な上限付き LRU キャッシュ（キー: str）。"""

    def __init__(self, maxsize: int = 4096) -> None:
        self.maxsize = int(maxsize)
        self._od: "OrderedDict[str, Any]" = OrderedDict()

    def get(self, key: str) -> Any | None:
        value = self._od.get(key)
        if value is not None:
            self._od.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._od[key] = value
        self._od.move_to_end(key)
        if len(self._od) > self.maxsize:
            self._od.popitem(last=False)


class _PairKerning:
    """`kern` テーブル、無ければ GPOS の `kern` feature からペアカーニング値を引く。"""

    def __init__(self, tt_font: Any) -> None:
        self._legacy: dict[tuple[str, str], int] = {}
        self._subtables: list[tuple[Any, dict[str, int]]] = []
        self._cache: dict[tuple[str, str], int] = {}

        if "kern" in tt_font:
            for table in getattr(tt_font["kern"], "kernTables", []):
                pairs = getattr(table, "kernTable", None)
                if pairs:
                    self._legacy.update(pairs)
                    break
        if not self._legacy and "GPOS" in tt_font:
            self._collect_gpos(tt_font["GPOS"].table)

    def _collect_gpos(self, gpos: Any) -> None:
        if gpos.FeatureList is None or gpos.LookupList is None:
            return
        indices: set[int] = set()
        for rec in gpos.FeatureList.FeatureRecord:
            if rec.FeatureTag == "kern":
                indices.update(rec.Feature.LookupListIndex)
        for idx in sorted(indices):
            lookup = gpos.LookupList.Lookup[idx]
            for sub in lookup.SubTable:
                lookup_type = lookup.LookupType
                if lookup_type == 9:
                    lookup_type = sub.ExtensionLookupType
                    sub = sub.ExtSubTable
                if lookup_type != 2 or sub.Coverage is None:
                    continue
                coverage = {name: i for i, name in enumerate(sub.Coverage.glyphs)}
                self._subtables.append((sub, coverage))

    def __call__(self, left: str, right: str) -> int:
        key = (left, right)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        value = self._lookup(left, right)
        self._cache[key] = value
        return value

    def _lookup(self, left: str, right: str) -> int:
        if self._legacy:
            return int(self._legacy.get((left, right), 0))
        for sub, coverage in self._subtables:
            cov_index = coverage.get(left)
            if cov_index is None:
                continue
            if sub.Format == 1:
                for rec in sub.PairSet[cov_index].PairValueRecord:
                    if rec.SecondGlyph == right:
                        return int(getattr(rec.Value1, "XAdvance", 0) or 0)
            elif sub.Format == 2:
                c1 = sub.ClassDef1.classDefs.get(left, 0) if sub.ClassDef1 else 0
                c2 = sub.ClassDef2.classDefs.get(right, 0) if sub.ClassDef2 else 0
                rec = sub.Class1Record[c1].Class2Record[c2]
                value = int(getattr(rec.Value1, "XAdvance", 0) or 0)
                if value:
                    return value
        return 0


class GlyphFont:
    """ロード済みフォント。描画パスからは読み取り専用の共有状態として使う。

    Parameters
    ----------
    tt_font : fontTools.ttLib.TTFont
        ロード済みの TTFont。
    path : Path or None
        ログ表示用のフォントパス。
    """

    def __init__(self, tt_font: Any, *, path: Path | None = None) -> None:
        self._tt_font = tt_font
        self.path = path
        self._glyph_set = tt_font.getGlyphSet()
        self._cmap = tt_font.getBestCmap() or {}
        self._hmtx = tt_font["hmtx"].metrics
        self._kerning = _PairKerning(tt_font)
        self._recordings = _LRU(maxsize=1024)
        self._warned: set[str] = set()

        hhea = tt_font["hhea"]
        self.metrics = FontMetrics(
            ascender=float(hhea.ascent),
            descender=float(hhea.descent),
            units_per_em=float(tt_font["head"].unitsPerEm),
        )

    @property
    def units_per_em(self) -> float:
        return self.metrics.units_per_em

    def glyph_name(self, char: str) -> str | None:
        """文字に対応するグリフ名を返す。フォントに無ければ None（警告は 1 文字 1 回）。"""
        name = self._cmap.get(ord(char))
        if name is None and char not in self._warned:
            self._warned.add(char)
            logger.warning(
                "Character '%s' (U+%04X) not found in font '%s'",
                char,
                ord(char),
                str(self.path),
            )
        return name

    def advance(self, glyph_name: str | None) -> float:
        """グリフの送り幅（フォント単位）。欠落文字は `.notdef` の幅で進める。"""
        name = glyph_name if glyph_name is not None else ".notdef"
        metric = self._hmtx.get(name)
        if metric is None:
            return 0.0
        return float(metric[0])

    def kerning(self, left: str, right: str) -> float:
        return float(self._kerning(left, right))

    def _recording(self, glyph_name: str) -> tuple:
        """合成グリフを分解済みの描画コマンド（`RecordingPen.value`）を返す。"""
        from fontTools.pens.recordingPen import DecomposingRecordingPen  # type: ignore[import-untyped]

        cached = self._recordings.get(glyph_name)
        if cached is not None:
            return cached

        glyph = self._glyph_set.get(glyph_name)
        if glyph is None:
            logger.warning("Glyph '%s' not found in font '%s'", glyph_name, str(self.path))
            self._recordings.set(glyph_name, tuple())
            return tuple()

        rec = DecomposingRecordingPen(self._glyph_set, reverseFlipped=True)
        try:
            glyph.draw(rec)
        except rec.MissingComponentError:  # type: ignore[attr-defined]
            logger.warning(
                "Glyph '%s' has missing components in font '%s'", glyph_name, str(self.path)
            )
            self._recordings.set(glyph_name, tuple())
            return tuple()

        result = tuple(rec.value)
        self._recordings.set(glyph_name, result)
        return result

    def glyph_rings(
        self,
        glyph_name: str,
        *,
        x: float,
        y: float,
        scale: float,
        precision: int,
        segment_length: float,
    ) -> list[np.ndarray]:
        """グリフを (x, y) のベースライン原点に置き、平坦化した閉輪郭列を返す。"""
        from fontPens.flattenPen import FlattenPen  # type: ignore[import-untyped]
        from fontTools.pens.recordingPen import RecordingPen, replayRecording  # type: ignore[import-untyped]

        commands = self._recording(glyph_name)
        if not commands:
            return []

        def place(pt: Any) -> Any:
            if pt is None:
                return None
            # フォント座標（Y+上）を文書座標（Y+下）へ反転しつつ、指定桁で量子化する。
            return (
                round(x + float(pt[0]) * scale, precision),
                round(y - float(pt[1]) * scale, precision),
            )

        placed = [(op, tuple(place(pt) for pt in args)) for op, args in commands]

        flat = RecordingPen()
        replayRecording(
            placed,
            FlattenPen(flat, approximateSegmentLength=float(segment_length), segmentLines=False),
        )
        return _commands_to_rings(flat.value)

    def line_outline(
        self,
        text: str,
        *,
        x: float,
        y: float,
        font_size: float,
        precision: int = 2,
        kerning: bool = True,
        fill_rule: str = "nonzero",
    ) -> Outline | None:
        """1 行分の文字列を、ベースライン原点 (x, y) に置いた塗り輪郭として返す。

        Parameters
        ----------
        text : str
            描画する 1 行。
        x, y : float
            ベースライン原点（文書単位）。
        font_size : float
            em の大きさ（文書単位）。
        precision : int
            座標の小数桁。小さいほどパスが軽く、粗くなる。
        kerning : bool
            True のときペアカーニングを適用する。
        fill_rule : str
            `"nonzero"` または `"evenodd"`。

        Returns
        -------
        Outline or None
            描画できるグリフが 1 つも無い場合は None。
        """
        scale = float(font_size) / self.units_per_em
        seg_len = max(float(font_size) * CURVE_SEGMENT_EM, 1e-4)
        digits = max(0, int(precision))

        rings: list[np.ndarray] = []
        pen_x = float(x)
        prev: str | None = None
        for ch in str(text):
            name = self.glyph_name(ch)
            if kerning and prev is not None and name is not None:
                pen_x += self.kerning(prev, name) * scale
            if name is not None:
                rings.extend(
                    self.glyph_rings(
                        name,
                        x=pen_x,
                        y=float(y),
                        scale=scale,
                        precision=digits,
                        segment_length=seg_len,
                    )
                )
            pen_x += self.advance(name) * scale
            prev = name

        if not rings:
            return None
        return rings_to_outline(rings, fill_rule=fill_rule)


def _commands_to_rings(commands: Any) -> list[np.ndarray]:
    """平坦化済みコマンド列（moveTo/lineTo/closePath）を閉輪郭の点列へ変換して返す。"""
    rings: list[np.ndarray] = []
    current: list[tuple[float, float]] = []

    def flush() -> None:
        nonlocal current
        pts = [p for i, p in enumerate(current) if i == 0 or p != current[i - 1]]
        if len(pts) > 1 and pts[0] == pts[-1]:
            pts = pts[:-1]
        if len(pts) >= 3:
            rings.append(np.asarray(pts, dtype=np.float64))
        current = []

    for op, args in commands:
        if op == "moveTo":
            flush()
            current.append((float(args[0][0]), float(args[0][1])))
        elif op == "lineTo":
            current.append((float(args[0][0]), float(args[0][1])))
        elif op in ("closePath", "endPath"):
            flush()
    flush()
    return rings


_FONTS: dict[str, GlyphFont] = {}


def load_font(font: str | Path | None = None, *, font_index: int = 0) -> GlyphFont:
    """フォントを解決・ロードして返す（パス単位でキャッシュ）。

    Raises
    ------
    FileNotFoundError
        フォントを解決できない場合。
    """
    from fontTools.ttLib import TTFont  # type: ignore[import-untyped]

    path = resolve_font_path(font)
    idx = max(0, int(font_index))
    cache_key = f"{path}|{idx}"
    cached = _FONTS.get(cache_key)
    if cached is not None:
        return cached

    if path.suffix.lower() == ".ttc":
        tt_font = TTFont(path, fontNumber=idx)
    else:
        tt_font = TTFont(path)
    loaded = GlyphFont(tt_font, path=path)
    _FONTS[cache_key] = loaded
    logger.debug("Loaded font '%s' (upem=%g)", str(path), loaded.units_per_em)
    return loaded


__all__ = ["FontMetrics", "GlyphFont", "load_font"]
