"""
どこで: `src/bookmark_gen/core/content.py`。
何を: seed 付き乱数ストリームから「それらしい」フェイクコード行を生成する。
なぜ: ブックマークの地紋となるテキストを、seed だけで再現できる形で得るため。

テンプレート選択とスロットの充填は共有ストリームを決まった順序で消費する。
順序を変えると同じ seed でも別の出力になる。
"""

from __future__ import annotations

from collections.abc import Callable

from .rng import AleaStream, choice, random_int, weighted_bool

THEME_WORDS = (
    "user",
    "room",
    "token",
    "state",
    "node",
    "view",
    "data",
    "rect",
    "path",
    "font",
    "line",
    "clip",
)
IDENT_SUFFIXES = ("Id", "Map", "List", "Cfg", "Ref", "Count", "Index", "Value", "State")
STRING_WORDS = ("hello", "bookmark", "paper", "opentype", "svg", "render", "stroke", "path")
POETIC_NUMBERS = (0, 1, 3, 7, 12, 42, 64, 108, 256, 404, 512, 1024)
METHOD_NAMES = ("add", "set", "get", "map", "filter")
COMMENT_TAGS = ("TODO", "FIXME", "NOTE")
COMMENT_PHRASES = ("cleanup", "optimize", "refactor", "edge case")

SUFFIX_PROBABILITY = 0.4
POETIC_PROBABILITY = 0.3


class CodeLineGenerator:
    """共有ストリームを消費してフェイクコード行を 1 行ずつ作る。"""

    def __init__(self, stream: AleaStream) -> None:
        self.stream = stream
        self._templates: tuple[Callable[[int], str], ...] = (
            lambda i: f"const {self.ident()} = {self.number()};",
            lambda i: f"let {self.ident()} = {self.string()};",
            lambda i: f"let {self.ident()} = {self.boolean()};",
            lambda i: f"function {self.ident()}({self.ident()}) {{ return {self.ident()}; }}",
            lambda i: f"if ({self.ident()} > {self.number()}) {{ {self.ident()}++; }}",
            lambda i: (
                f"for (let i = 0; i < {random_int(self.stream, 3, 12)}; i++) "
                f"{{ {self.ident()}.push(i); }}"
            ),
            lambda i: f"while ({self.ident()}) {{ {self.ident()} = {self.boolean()}; }}",
            lambda i: f"console.log({self.ident()}, {self.string()});",
            lambda i: f"export const {self.ident()} = ({self.ident()}) => {self.ident()};",
            lambda i: f"{self.ident()}.{choice(self.stream, METHOD_NAMES)}({self.ident()});",
            lambda i: self.comment(i),
        )

    @property
    def template_count(self) -> int:
        return len(self._templates)

    def ident(self) -> str:
        if weighted_bool(self.stream, SUFFIX_PROBABILITY):
            return choice(self.stream, THEME_WORDS) + choice(self.stream, IDENT_SUFFIXES)
        return choice(self.stream, THEME_WORDS)

    def string(self) -> str:
        return f'"{choice(self.stream, STRING_WORDS)}-{random_int(self.stream, 1, 99)}"'

    def number(self) -> str:
        if weighted_bool(self.stream, POETIC_PROBABILITY):
            return str(choice(self.stream, POETIC_NUMBERS))
        return str(random_int(self.stream, 0, 999))

    def boolean(self) -> str:
        return "true" if weighted_bool(self.stream, 0.5) else "false"

    def comment(self, index: int) -> str:
        tag = choice(self.stream, COMMENT_TAGS)
        phrase = choice(self.stream, COMMENT_PHRASES)
        return f"// {tag}: {phrase} {index}"

    def line(self, index: int) -> str:
        """1 始まりの行番号 index の行を生成して返す。"""
        template = self._templates[random_int(self.stream, 0, len(self._templates) - 1)]
        return template(index)


def generate_code_lines(stream: AleaStream, line_count: int) -> list[str]:
    """line_count 行のフェイクコードを順に生成して返す。"""
    gen = CodeLineGenerator(stream)
    return [gen.line(i) for i in range(1, max(0, int(line_count)) + 1)]


def header_lines(header: tuple[str, ...], *, seed: str) -> list[str]:
    """見出し行のテンプレートに seed を差し込んで返す。"""
    return [h.replace("{seed}", seed) for h in header]


__all__ = [
    "CodeLineGenerator",
    "COMMENT_TAGS",
    "POETIC_NUMBERS",
    "THEME_WORDS",
    "generate_code_lines",
    "header_lines",
]
