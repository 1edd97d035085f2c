"""
どこで: `src/bookmark_gen/core/session.py`。
何を: ロード済みフォントと「現在の文書」を保持し、パラメータ変更ごとに再描画して差し替えるセッション。
なぜ: UI 側の再描画要求を「最後の要求が勝つ」形で扱い、古い文書を書き換えずに参照だけを入れ替えるため。
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .document import BookmarkDocument
from .glyphs import GlyphFont
from .params import BookmarkParams, normalize_params
from .pipeline import render
from .rng import random_seed

_logger = logging.getLogger(__name__)


class BookmarkSession:
    """同期的な描画パスを 1 本ずつ実行し、最新の文書だけを保持する。

    Parameters
    ----------
    font : GlyphFont or None
        テキストモード用のフォント。描画パスからは読み取りのみ。
    params : BookmarkParams or None
        初期パラメータ。seed が空なら生成される。
    """

    def __init__(self, font: GlyphFont | None = None, params: BookmarkParams | None = None) -> None:
        self.font = font
        self._params = normalize_params(params or BookmarkParams())
        self._document: BookmarkDocument | None = None
        self._generation = 0

    @property
    def params(self) -> BookmarkParams:
        return self._params

    @property
    def generation(self) -> int:
        """これまでに完了した描画パスの回数。"""
        return self._generation

    @property
    def document(self) -> BookmarkDocument:
        """現在の文書。まだ無ければ描画してから返す。"""
        if self._document is None:
            return self.rerender()
        return self._document

    def rerender(self) -> BookmarkDocument:
        """現在のパラメータで描画パスを最後まで実行し、文書を差し替えて返す。"""
        doc = render(self._params, self.font)
        self._document = doc
        self._generation += 1
        return doc

    def set_params(self, params: BookmarkParams) -> BookmarkDocument:
        self._params = normalize_params(params)
        return self.rerender()

    def update(self, **changes: Any) -> BookmarkDocument:
        """トップレベルのフィールドを差し替えて再描画する。"""
        return self.set_params(replace(self._params, **changes))

    def regenerate(self) -> BookmarkDocument:
        """新しい seed を引いて再描画する。"""
        seed = random_seed()
        _logger.info("regenerate: seed=%s", seed)
        return self.update(seed=seed)

    def svg_text(self) -> str:
        from bookmark_gen.export.svg import document_to_svg

        return document_to_svg(self.document)


__all__ = ["BookmarkSession"]
