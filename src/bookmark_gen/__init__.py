# どこで: `src/bookmark_gen/__init__.py`。
# 何を: ルート `bookmark_gen` パッケージの公開 API を定義する。
# なぜ: import 起点を `bookmark_gen` に統一するため。

from __future__ import annotations

from bookmark_gen.core.document import BookmarkDocument
from bookmark_gen.core.glyphs import GlyphFont, load_font
from bookmark_gen.core.params import (
    BookmarkParams,
    Margins,
    NoiseParams,
    ParameterError,
    ShapeParams,
    StyleParams,
    TextParams,
    params_from_mapping,
)
from bookmark_gen.core.pipeline import render
from bookmark_gen.core.rng import random_seed
from bookmark_gen.core.session import BookmarkSession
from bookmark_gen.export.svg import document_to_svg, export_svg

__all__ = [
    "BookmarkDocument",
    "BookmarkParams",
    "BookmarkSession",
    "GlyphFont",
    "Margins",
    "NoiseParams",
    "ParameterError",
    "ShapeParams",
    "StyleParams",
    "TextParams",
    "document_to_svg",
    "export_svg",
    "load_font",
    "params_from_mapping",
    "random_seed",
    "render",
]
