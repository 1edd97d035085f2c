# どこで: `src/bookmark_gen/core/runtime_config.py`。
# 何を: config.yaml（出力先・フォント探索先・既定フォント）の探索・ロード・検証を行う。
# なぜ: フォントはリポジトリに同梱できないため、置き場所をユーザー側で指定できるようにするため。

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

CONFIG_VERSION = 1
_PACKAGED_CONFIG = ("resource", "default_config.yaml")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """ロード済みの実行時設定。

    Parameters
    ----------
    config_path : Path or None
        同梱デフォルトへ最後に重ねたユーザー config。無ければ None。
    output_dir : Path
        `bookmark-gen` が SVG を書き出すルート。
    font_dirs : tuple[Path, ...]
        フォント名・ステム指定の探索先（再帰）。
    default_font : str
        フォント指定が空のときに解決するフォント。
    """

    config_path: Path | None
    output_dir: Path
    font_dirs: tuple[Path, ...]
    default_font: str


_explicit_path: Path | None = None
_cached: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """明示 config のパスを設定し、キャッシュを捨てる（None で解除）。"""

    global _explicit_path, _cached
    _explicit_path = None if path is None else Path(str(path)).expanduser()
    _cached = None


def _user_config_candidates() -> tuple[Path, ...]:
    return (
        Path.cwd() / ".bookmark_gen" / "config.yaml",
        Path.home() / ".config" / "bookmark_gen" / "config.yaml",
    )


def _to_path(text: Any) -> Path | None:
    s = "" if text is None else str(text).strip()
    if not s:
        return None
    return Path(os.path.expandvars(os.path.expanduser(s)))


def _to_paths(value: Any) -> tuple[Path, ...]:
    """文字列（`os.pathsep` 区切り）またはリストをパス列にして返す。"""
    if value is None:
        return ()
    if not isinstance(value, (str, list, tuple)):
        raise RuntimeError(f"config の paths.font_dirs はリストである必要があります: got={value!r}")
    items = value.split(os.pathsep) if isinstance(value, str) else value
    return tuple(p for p in (_to_path(item) for item in items) if p is not None)


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise RuntimeError(f"config の {key} は mapping である必要があります: got={value!r}")
    return value


def load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML を mapping としてロードして返す。空文書は空 dict。

    Raises
    ------
    RuntimeError
        YAML として壊れている、またはトップレベルが mapping でない場合。
    """

    import yaml  # type: ignore[import-untyped]

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"YAML の読み込みに失敗しました: source={source}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"YAML のトップレベルは mapping である必要があります: source={source}")
    return data


def load_yaml_file(path: Path) -> dict[str, Any]:
    return load_yaml_text(Path(path).read_text(encoding="utf-8"), source=str(path))


def _packaged_defaults() -> dict[str, Any]:
    ref = resources.files("bookmark_gen").joinpath(*_PACKAGED_CONFIG)
    return load_yaml_text(ref.read_text(encoding="utf-8"), source="/".join(("bookmark_gen",) + _PACKAGED_CONFIG))


def _overlay(base: dict[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """セクション（1 段目の mapping）単位でキーを上書きした新しい dict を返す。"""

    out = dict(base)
    for key, value in top.items():
        below = out.get(key)
        out[key] = {**below, **value} if isinstance(value, dict) and isinstance(below, dict) else value
    return out


def _validate(payload: Mapping[str, Any], *, config_path: Path | None) -> RuntimeConfig:
    try:
        version = int(payload.get("version"))  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"config の version は整数である必要があります: got={payload.get('version')!r}") from exc
    if version != CONFIG_VERSION:
        raise RuntimeError(f"未対応の config version です: got={version}")

    paths = _section(payload, "paths")
    output_dir = _to_path(paths.get("output_dir"))
    if output_dir is None:
        raise RuntimeError("paths.output_dir が空です")

    default_font = str(_section(payload, "font").get("default") or "").strip()
    if not default_font:
        raise RuntimeError("font.default が空です")

    return RuntimeConfig(
        config_path=config_path,
        output_dir=output_dir,
        font_dirs=_to_paths(paths.get("font_dirs")),
        default_font=default_font,
    )


def runtime_config() -> RuntimeConfig:
    """同梱デフォルト → 自動探索 config → 明示 config の順に重ねた設定を返す（キャッシュ）。

    Raises
    ------
    FileNotFoundError
        `set_config_path` で指定したファイルが無い場合。
    RuntimeError
        config の内容が不正な場合。
    """

    global _cached
    if _cached is not None:
        return _cached

    explicit = _explicit_path
    if explicit is not None and not explicit.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit}")
    discovered = next((p for p in _user_config_candidates() if p.is_file()), None)

    payload = _packaged_defaults()
    for layer in (discovered, explicit):
        if layer is not None:
            payload = _overlay(payload, load_yaml_file(layer))

    _cached = _validate(payload, config_path=explicit or discovered)
    return _cached


def output_root_dir() -> Path:
    """SVG 出力の既定ルートディレクトリを返す。"""

    return runtime_config().output_dir


__all__ = [
    "CONFIG_VERSION",
    "RuntimeConfig",
    "load_yaml_file",
    "load_yaml_text",
    "output_root_dir",
    "runtime_config",
    "set_config_path",
]
