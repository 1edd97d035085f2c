# どこで: `src/bookmark_gen/cli.py`。
# 何を: パラメータファイル / 引数から 1 枚のブックマーク SVG を生成して保存する CLI。
# なぜ: 対話 UI を立ち上げずに、seed 単位で再現可能な SVG を書き出せるようにするため。

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from bookmark_gen.core.glyphs import load_font
from bookmark_gen.core.output_paths import output_path_for_seed
from bookmark_gen.core.params import BookmarkParams, ParameterError, normalize_params, params_from_mapping
from bookmark_gen.core.pipeline import render
from bookmark_gen.core.runtime_config import load_yaml_file, set_config_path
from bookmark_gen.export.svg import export_svg

_logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        set_config_path(args.config)

    try:
        params = _build_params(args)
        font = load_font(args.font or None) if params.mode == "text" else None
        document = render(params, font)
    except (ParameterError, FileNotFoundError, RuntimeError) as exc:
        _logger.error("%s", exc)
        return 2

    out = Path(args.out) if args.out else output_path_for_seed(seed=document.seed)
    written = export_svg(document, out)
    if not document.has_outline:
        _logger.warning("輪郭が空のため、背景（とデバッグ枠）のみを出力しました")
    print(f"[bookmark-gen] seed={document.seed} lines={document.line_count} wrote: {written}")  # noqa: T201
    return 0


def _build_params(args: argparse.Namespace) -> BookmarkParams:
    payload = load_yaml_file(Path(args.params)) if args.params else None
    params = params_from_mapping(payload)

    if args.seed is not None:
        params = replace(params, seed=str(args.seed))
    if args.mode:
        params = replace(params, mode=str(args.mode))
    if args.lines is not None:
        params = replace(params, text=replace(params.text, line_count=int(args.lines)))
    if args.no_clip:
        params = replace(params, clip_to_frame=False)
    if args.debug_frame:
        params = replace(params, show_debug_frame=True)
    # seed 未指定ならここで確定させ、出力ファイル名と本文で同じ seed を使う。
    return normalize_params(params)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="bookmark-gen", description="seed からブックマーク SVG を生成する")
    p.add_argument("--params", default="", help="パラメータ YAML（BookmarkParams の入れ子 mapping）")
    p.add_argument("--seed", default=None, help="乱数 seed（省略時は自動生成）")
    p.add_argument("--mode", choices=("text", "shape"), default="", help="生成モード")
    p.add_argument("--font", default="", help="フォントのパス / ファイル名 / ステム（省略時は config の font.default）")
    p.add_argument("--lines", type=int, default=None, help="生成する行数（収まらない行は捨てる）")
    p.add_argument("--no-clip", action="store_true", help="フレームでの切り抜きを行わない")
    p.add_argument("--debug-frame", action="store_true", help="フレームを破線で出力に残す")
    p.add_argument("--config", default="", help="config.yaml のパス")
    p.add_argument("--out", default="", help="出力 SVG パス（省略時: <output_dir>/svg/bookmark_<seed>.svg）")
    p.add_argument("-v", "--verbose", action="store_true", help="DEBUG ログを出す")
    return p.parse_args(argv)


if __name__ == "__main__":
    raise SystemExit(main())
