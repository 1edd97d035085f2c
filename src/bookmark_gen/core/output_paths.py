# どこで: `src/bookmark_gen/core/output_paths.py`。
# 何を: seed と出力種別から、出力ファイルの既定保存パスを決める。
# なぜ: `output/{kind}/` 配下に seed ごとのファイルを整理して置くため。

from __future__ import annotations

import re
from pathlib import Path

from bookmark_gen.core.runtime_config import output_root_dir


def _sanitize_filename_fragment(text: str) -> str:
    """ファイル名に埋め込めるように text を正規化して返す。"""

    normalized = re.sub(r"[^A-Za-z0-9._-]+", "_", str(text))
    normalized = normalized.strip("._-")
    return normalized or "unknown"


def output_path_for_seed(*, seed: str, kind: str = "svg", ext: str = "svg") -> Path:
    """`output_root/{kind}/bookmark_<seed>.{ext}` を返す。"""

    ext_norm = str(ext).lstrip(".").strip()
    if not ext_norm:
        raise ValueError("ext は空でない必要がある")
    filename = f"bookmark_{_sanitize_filename_fragment(seed)}.{ext_norm}"
    return output_root_dir() / str(kind) / filename


__all__ = ["output_path_for_seed"]
