"""Configuration for the capacity pages (data files, persistence keys)."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import streamlit as st
from streamlit.errors import StreamlitSecretNotFoundError

from services.capacity_store import DEFAULT_HISTORY_NAME, DEFAULT_SNAPSHOT_NAME, INSTALLED_KEY, PLF_KEY


@dataclass(frozen=True)
class CapacityConfig:
    """Where the capacity CSVs live and how edits are persisted.

    ``snapshot_file`` is the single-row installed capacity CSV (GW per source);
    ``history_file`` is the monthly time series. Installed/PLF edits persist in
    the browser session unless ``state_file`` names a JSON file (relative to
    ``data_dir`` unless absolute) shared by every session of the server.
    """

    data_dir: Path
    snapshot_file: str = DEFAULT_SNAPSHOT_NAME
    history_file: str = DEFAULT_HISTORY_NAME
    state_file: Optional[str] = None
    installed_key: str = INSTALLED_KEY
    plf_key: str = PLF_KEY
    months_back: int = 12
    load_timeout_seconds: float = 5.0

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / self.snapshot_file

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    @property
    def state_path(self) -> Optional[Path]:
        if not self.state_file:
            return None
        path = Path(self.state_file)
        return path if path.is_absolute() else self.data_dir / path


def _secrets_section() -> Optional[Mapping[str, Any]]:
    try:
        section = st.secrets.get("capacity")
    except StreamlitSecretNotFoundError:
        section = None
    return section


def load_config(base_dir: Path, overrides: Optional[Mapping[str, Any]] = None) -> CapacityConfig:
    """Build the config from defaults, then the ``[capacity]`` secrets section.

    Unknown keys are ignored. ``overrides`` takes the place of the secrets
    lookup when given (used by tests and embedding pages).
    """

    cfg = CapacityConfig(data_dir=Path(base_dir) / "data")
    section = overrides if overrides is not None else _secrets_section()
    if not section:
        return cfg

    known = {f.name for f in fields(CapacityConfig)}
    updates: dict[str, Any] = {}
    for key, value in dict(section).items():
        if key not in known:
            continue
        if key == "data_dir":
            path = Path(value)
            updates[key] = path if path.is_absolute() else Path(base_dir) / path
        elif key == "months_back":
            updates[key] = int(value)
        elif key == "load_timeout_seconds":
            updates[key] = float(value)
        elif key == "state_file":
            updates[key] = str(value) if value else None
        else:
            updates[key] = str(value)
    return replace(cfg, **updates)
