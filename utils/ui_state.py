"""Session wiring for the capacity store and its background loads."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import streamlit as st

from services.capacity_loads import CapacityLoads
from services.capacity_store import CapacityStore
from utils.config import CapacityConfig
from utils.io import file_fetcher
from utils.persistence import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

CAPACITY_STORE_SESSION_KEY = "capacity_store"
CAPACITY_LOADS_SESSION_KEY = "capacity_loads"


def get_base_dir() -> Path:
    return Path(__file__).resolve().parent.parent


@st.cache_resource
def _shared_persistence(state_path: str) -> JsonFileKeyValueStore:
    """One persistence store per state file, shared across sessions."""

    return JsonFileKeyValueStore(Path(state_path))


def _persistence_for(cfg: CapacityConfig) -> KeyValueStore:
    # Without a configured state file edits stay private to the browser session.
    if cfg.state_path is None:
        return MemoryKeyValueStore(st.session_state)
    return _shared_persistence(str(cfg.state_path))


def _build_store(cfg: CapacityConfig) -> CapacityStore:
    return CapacityStore(
        _persistence_for(cfg),
        snapshot_name=cfg.snapshot_file,
        history_name=cfg.history_file,
        installed_key=cfg.installed_key,
        plf_key=cfg.plf_key,
        months_back=cfg.months_back,
    )


def bootstrap_capacity_state(cfg: CapacityConfig) -> CapacityStore:
    """Return the session's store, creating it and starting both loads once."""

    store: Optional[CapacityStore] = st.session_state.get(CAPACITY_STORE_SESSION_KEY)
    if store is not None and not store.torn_down:
        return store

    store = _build_store(cfg)
    loads = CapacityLoads(
        store,
        fetch_snapshot=file_fetcher([cfg.snapshot_path]),
        fetch_history=file_fetcher([cfg.history_path]),
    )
    loads.start()
    st.session_state[CAPACITY_STORE_SESSION_KEY] = store
    st.session_state[CAPACITY_LOADS_SESSION_KEY] = loads
    return store


def get_capacity_loads() -> Optional[CapacityLoads]:
    return st.session_state.get(CAPACITY_LOADS_SESSION_KEY)


def settle_capacity_loads(timeout: Optional[float]) -> bool:
    """Wait briefly for outstanding loads and apply them; ``True`` if still pending."""

    loads = get_capacity_loads()
    if loads is None:
        return False
    return loads.wait(timeout)


def reload_capacity_state(cfg: CapacityConfig) -> CapacityStore:
    """Tear down the current store (discarding in-flight loads) and start over.

    Persisted edits are re-read by the new store, so only the CSV-derived
    state is refreshed.
    """

    loads = get_capacity_loads()
    if loads is not None:
        loads.cancel()
    st.session_state.pop(CAPACITY_STORE_SESSION_KEY, None)
    st.session_state.pop(CAPACITY_LOADS_SESSION_KEY, None)
    return bootstrap_capacity_state(cfg)
