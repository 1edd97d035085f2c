# どこで: `src/bookmark_gen/core/font_resolver.py`。
# 何を: フォント指定（実在パス / font_dirs 内のファイル名 / ステムの部分一致）を実体ファイルへ解決する。
# なぜ: フォントは同梱しないため、config.yaml の `font_dirs` から確実に探せる経路を用意するため。

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from bookmark_gen.core.runtime_config import runtime_config

FONT_SUFFIXES = frozenset({".ttf", ".otf", ".ttc"})

_CONFIG_EXAMPLE = 'paths:\n  font_dirs:\n    - "~/Fonts"\nfont:\n  default: "MyFont-Regular.ttf"\n'


@lru_cache(maxsize=16)
def _fonts_under(dirs: tuple[Path, ...]) -> tuple[Path, ...]:
    """dirs 以下（再帰）のフォントファイルを、パス順に重複なく返す。"""
    found = {
        fp.resolve()
        for root in dirs
        if root.is_dir()
        for fp in root.rglob("*")
        if fp.suffix.lower() in FONT_SUFFIXES and fp.is_file()
    }
    return tuple(sorted(found))


def clear_font_cache() -> None:
    """フォントファイル列挙のキャッシュを破棄する。"""
    _fonts_under.cache_clear()


def _squash(text: str) -> str:
    return text.lower().replace(" ", "")


def resolve_font_path(font: str | Path | None = None) -> Path:
    """`font` 指定を実体ファイルの絶対パスへ解決して返す。

    Parameters
    ----------
    font : str or Path or None
        次の順で照合する。
        1) 実在するパス（絶対/相対）
        2) `font_dirs` 直下のファイル名
        3) `font_dirs` 以下のファイル名・ステムへの部分一致（大文字小文字と空白を無視）
        None / 空文字なら config の `font.default` を使う。

    Raises
    ------
    FileNotFoundError
        どの経路でも見つからない場合（探索したディレクトリと config 例を含む）。
    """

    cfg = runtime_config() if font is None or not str(font).strip() else None
    raw = cfg.default_font if cfg is not None else str(font).strip()

    candidate = Path(raw).expanduser()
    if candidate.is_file():
        return candidate.resolve()

    cfg = cfg or runtime_config()
    dirs = tuple(Path(d).expanduser() for d in cfg.font_dirs)

    for d in dirs:
        if (d / raw).is_file():
            return (d / raw).resolve()

    key = _squash(raw)
    for fp in _fonts_under(dirs):
        if key in _squash(fp.name) or key in _squash(fp.stem):
            return fp

    searched = ", ".join(str(d) for d in dirs) or "(none)"
    raise FileNotFoundError(
        f"フォントが見つかりません: {raw!r}。実在パスを渡すか、config.yaml の `font_dirs` に"
        " フォントの置き場所を追加してください"
        "（./.bookmark_gen/config.yaml または ~/.config/bookmark_gen/config.yaml）。"
        f"\n\n{_CONFIG_EXAMPLE}\nsearched_dirs={searched}, config_path={cfg.config_path}"
    )


__all__ = ["FONT_SUFFIXES", "clear_font_cache", "resolve_font_path"]
