from pathlib import Path

import pytest

from bookmark_gen.core.output_paths import output_path_for_seed
from bookmark_gen.core.runtime_config import output_root_dir, runtime_config, set_config_path


@pytest.fixture(autouse=True)
def _reset_runtime_config() -> None:
    set_config_path(None)
    yield
    set_config_path(None)


def _isolate_config_discovery(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_output_root_dir_uses_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    assert output_root_dir() == Path("data") / "output"
    cfg = runtime_config()
    assert cfg.config_path is None
    assert cfg.font_dirs == (Path("data") / "input" / "font",)
    assert cfg.default_font == "JetBrainsMono-Thin.ttf"


def test_discovered_config_overrides_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".bookmark_gen" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text(
        'paths:\n  output_dir: "./out_discovered"\n  font_dirs:\n    - "./fonts_discovered"\n',
        encoding="utf-8",
    )

    assert output_root_dir() == Path("out_discovered")
    cfg = runtime_config()
    assert cfg.config_path == discovered
    assert cfg.font_dirs == (Path("fonts_discovered"),)
    assert cfg.default_font == "JetBrainsMono-Thin.ttf"


def test_home_config_is_discovered(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    home_cfg = tmp_path / ".config" / "bookmark_gen" / "config.yaml"
    home_cfg.parent.mkdir(parents=True, exist_ok=True)
    home_cfg.write_text('font:\n  default: "Other.otf"\n', encoding="utf-8")

    cfg = runtime_config()
    assert cfg.config_path == home_cfg
    assert cfg.default_font == "Other.otf"


def test_explicit_config_overrides_discovered_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".bookmark_gen" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text('paths:\n  output_dir: "./out_discovered"\n', encoding="utf-8")

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text('paths:\n  output_dir: "./out_explicit"\n', encoding="utf-8")

    set_config_path(explicit)
    assert output_root_dir() == Path("out_explicit")
    assert runtime_config().config_path == explicit


def test_missing_explicit_config_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    set_config_path(tmp_path / "nope.yaml")
    with pytest.raises(FileNotFoundError):
        runtime_config()


@pytest.mark.parametrize(
    "body",
    [
        "version: 2\n",
        "version: abc\n",
        "- just\n- a list\n",
        "paths: [1, 2]\n",
        'font:\n  default: ""\n',
    ],
)
def test_invalid_config_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, body: str):
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "bad.yaml"
    explicit.write_text(body, encoding="utf-8")
    set_config_path(explicit)
    with pytest.raises(RuntimeError):
        runtime_config()


def test_output_path_for_seed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    assert output_path_for_seed(seed="abc123") == Path("data") / "output" / "svg" / "bookmark_abc123.svg"
    assert output_path_for_seed(seed="a/b c").name == "bookmark_a_b_c.svg"
    with pytest.raises(ValueError):
        output_path_for_seed(seed="x", ext="")
