"""Resource readers for the bundled capacity CSV files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List

ResourceFetcher = Callable[[], str]


def read_resource_text(path_candidates: List[Any]) -> str:
    """Return the text of the first readable candidate.

    Candidates may be paths or file-like objects exposing ``read()``. Raises
    ``RuntimeError`` naming every candidate and the last error when none can
    be read.
    """

    last_err = None
    for candidate in path_candidates:
        try:
            if hasattr(candidate, "read"):
                content = candidate.read()
                return content.decode("utf-8-sig") if isinstance(content, bytes) else content
            return Path(candidate).read_text(encoding="utf-8-sig")
        except Exception as e:  # pragma: no cover - errors handled via last_err
            last_err = e
    raise RuntimeError(
        "Failed to read resource. "
        f"Looked for: {path_candidates}. Last error: {last_err}"
    )


def file_fetcher(path_candidates: List[Any]) -> ResourceFetcher:
    """Bind ``path_candidates`` into a zero-argument fetcher for background loads."""

    candidates = list(path_candidates)

    def _fetch() -> str:
        return read_resource_text(candidates)

    return _fetch
