"""
どこで: `src/bookmark_gen/core/document.py`。
何を: 合成済み輪郭・背景・デバッグ枠をまとめた完成文書 `BookmarkDocument` を組み立てる。
なぜ: 描画パスの結果を「共有 DOM の書き換え」ではなく、呼び出し側が差し替える戻り値として扱うため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .outline import Outline
from .params import BookmarkParams


@dataclass(frozen=True, slots=True)
class FrameRect:
    """余白で内側に寄せた安全領域（左上原点、y 下向き）。"""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_params(cls, params: BookmarkParams) -> "FrameRect":
        m = params.margins
        return cls(
            x=float(m.left),
            y=float(m.top),
            width=float(params.drawable_width),
            height=float(params.drawable_height),
        )

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True, slots=True)
class BookmarkDocument:
    """1 回の描画パスで得られる完成文書。

    Parameters
    ----------
    width, height : float
        物理寸法（mm）かつ viewBox 寸法。
    seed : str
        生成に使った seed。
    background_color : str or None
        背景矩形の塗り色。None なら背景を出力しない。
    fill_color : str
        合成輪郭の塗り色。
    outline : Outline or None
        union（と必要なら intersect）済みの輪郭。None は「形状なし」。
    debug_frame : FrameRect or None
        デバッグ表示するフレーム。None ならフレームは破棄済み。
    line_count : int
        テキストモードで実際に配置された行数（図形モードでは図形数）。
    """

    width: float
    height: float
    seed: str
    background_color: str | None
    fill_color: str
    outline: Outline | None
    debug_frame: FrameRect | None
    line_count: int = 0

    @property
    def has_outline(self) -> bool:
        return self.outline is not None


def assemble_document(
    params: BookmarkParams,
    outline: Outline | None,
    frame: FrameRect,
    *,
    line_count: int = 0,
) -> BookmarkDocument:
    """正規化済みパラメータと最終輪郭から文書を組み立てて返す。"""
    return BookmarkDocument(
        width=float(params.width),
        height=float(params.height),
        seed=params.seed,
        background_color=params.style.background_color,
        fill_color=params.style.fill_color,
        outline=outline,
        debug_frame=frame if params.show_debug_frame else None,
        line_count=int(line_count),
    )


__all__ = ["BookmarkDocument", "FrameRect", "assemble_document"]
