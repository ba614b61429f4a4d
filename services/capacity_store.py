"""Capacity state: installed/PLF edits, the installed snapshot and monthly history.

``CapacityStore`` owns every piece of mutable state the capacity pages read.
Initialization runs defaults (0 GW / 0 % everywhere), then the persisted
overlay from the key-value store, then optionally the snapshot CSV. Each
resource load is tracked with its own :class:`LoadState` and a generation
counter so that only the most recent, non-cancelled completion is applied.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from services.capacity_csv import parse_csv_text
from services.month_keys import (
    Selection,
    is_month_key,
    month_sort_key,
    reconcile_selection,
    select_end,
    select_start,
)
from utils.numeric import safe_number
from utils.persistence import KeyValueStore

INSTALLED_KEY = "ratedCapacity_installed"
PLF_KEY = "ratedCapacity_plf"
DEFAULT_SNAPSHOT_NAME = "Capacity.csv"
DEFAULT_HISTORY_NAME = "capacity_monthly.csv"


class Source(str, Enum):
    COAL = "Coal"
    OIL_GAS = "Oil & Gas"
    NUCLEAR = "Nuclear"
    HYDRO = "Hydro"
    SOLAR = "Solar"
    WIND = "Wind"
    SMALL_HYDRO = "Small-Hydro"
    BIO_POWER = "Bio Power"


# Display order.
SOURCES: tuple[Source, ...] = tuple(Source)

SourceValues = Mapping[Source, float]


class LoadState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


@dataclass(frozen=True)
class HistoryRow:
    """Capacity by source (GW) reported for one month."""

    month: str
    values: SourceValues


@dataclass(frozen=True)
class LoadTicket:
    """Identifies one issued load; stale tickets are ignored on completion."""

    resource: str
    generation: int


def zero_values() -> Dict[Source, float]:
    return {source: 0.0 for source in SOURCES}


def freeze_values(values: Mapping[Source, float]) -> SourceValues:
    """Return an immutable full mapping in display order (missing sources → 0)."""

    return MappingProxyType({source: safe_number(values.get(source)) for source in SOURCES})


def parse_snapshot(text: str) -> Dict[Source, float]:
    """Read installed capacity (GW) from a single-row CSV.

    Only the first data row is used; Source columns match by exact name.
    Raises ``ValueError`` when the file is empty or carries no Source column.
    """

    table = parse_csv_text(text)
    if table.is_empty:
        raise ValueError("Empty CSV")
    row = table.rows[0]
    found: Dict[Source, float] = {}
    for source in SOURCES:
        idx = table.column_index(source.value)
        if idx is not None:
            found[source] = safe_number(table.cell(row, idx))
    if not found:
        raise ValueError("No capacity source columns found")
    return found


def parse_history(text: str) -> List[HistoryRow]:
    """Read monthly capacity rows sorted by month.

    Requires a ``Month`` column (case-insensitive). Rows whose month is not a
    valid ``MM/YYYY`` key are skipped; a repeated month keeps the last row.
    """

    table = parse_csv_text(text)
    if table.is_empty:
        raise ValueError("Empty CSV")
    month_idx = table.column_index("month", case_sensitive=False)
    if month_idx is None:
        raise ValueError('Missing "Month" column')
    source_idx = {source: table.column_index(source.value) for source in SOURCES}

    by_month: Dict[str, HistoryRow] = {}
    for row in table.rows:
        month = (table.cell(row, month_idx) or "").strip()
        if not is_month_key(month):
            continue
        values = {source: safe_number(table.cell(row, idx)) for source, idx in source_idx.items()}
        by_month[month] = HistoryRow(month=month, values=freeze_values(values))
    return sorted(by_month.values(), key=lambda r: month_sort_key(r.month))


def _read_persisted(kv: KeyValueStore, key: str) -> Dict[Source, float]:
    values = zero_values()
    try:
        raw = kv.get_item(key)
        if raw:
            payload = json.loads(raw)
            if isinstance(payload, dict):
                for source in SOURCES:
                    values[source] = safe_number(payload.get(source.value))
    except Exception as exc:
        logging.getLogger(__name__).debug("Ignoring persisted %s: %s", key, exc)
        return zero_values()
    return values


def _write_persisted(kv: KeyValueStore, key: str, values: SourceValues) -> None:
    try:
        kv.set_item(key, json.dumps({source.value: values[source] for source in SOURCES}))
    except Exception as exc:
        logging.getLogger(__name__).debug("Could not persist %s: %s", key, exc)


class CapacityStore:
    """Single owner of installed capacity, PLF, history and the month selection.

    All mutation entry points are expected to be called from one thread (the
    Streamlit script run). Background fetches hand their results back through
    :meth:`complete_snapshot_load` / :meth:`complete_history_load`.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        snapshot_name: str = DEFAULT_SNAPSHOT_NAME,
        history_name: str = DEFAULT_HISTORY_NAME,
        installed_key: str = INSTALLED_KEY,
        plf_key: str = PLF_KEY,
        months_back: int = 12,
    ) -> None:
        self._kv = kv
        self.snapshot_name = snapshot_name
        self.history_name = history_name
        self._installed_key = installed_key
        self._plf_key = plf_key
        self.months_back = months_back

        self._installed: SourceValues = freeze_values(_read_persisted(kv, installed_key))
        self._plf: SourceValues = freeze_values(_read_persisted(kv, plf_key))
        self._history: tuple[HistoryRow, ...] = ()
        self._selection: Optional[Selection] = None

        self.snapshot_state = LoadState.UNINITIALIZED
        self.history_state = LoadState.UNINITIALIZED
        self.snapshot_message: Optional[str] = None
        self.history_message: Optional[str] = None

        self._generations: Dict[str, int] = {"snapshot": 0, "history": 0}
        self._torn_down = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def installed(self) -> SourceValues:
        return self._installed

    @property
    def plf(self) -> SourceValues:
        return self._plf

    @property
    def history(self) -> Sequence[HistoryRow]:
        return self._history

    @property
    def month_options(self) -> List[str]:
        return [row.month for row in self._history]

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def find_row(self, month: Optional[str]) -> Optional[HistoryRow]:
        if not month:
            return None
        for row in self._history:
            if row.month == month:
                return row
        return None

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------
    def set_installed(self, source: Source, value) -> None:
        updated = dict(self._installed)
        updated[Source(source)] = safe_number(value)
        self._installed = freeze_values(updated)
        _write_persisted(self._kv, self._installed_key, self._installed)

    def set_plf(self, source: Source, value) -> None:
        updated = dict(self._plf)
        updated[Source(source)] = safe_number(value)
        self._plf = freeze_values(updated)
        _write_persisted(self._kv, self._plf_key, self._plf)

    def select_start(self, month: str) -> Optional[Selection]:
        if self._selection is None:
            return None
        self._selection = select_start(self._selection, month)
        return self._selection

    def select_end(self, month: str) -> Optional[Selection]:
        if self._selection is None:
            return None
        self._selection = select_end(self._selection, month)
        return self._selection

    # ------------------------------------------------------------------
    # Load lifecycle
    # ------------------------------------------------------------------
    def _issue(self, resource: str) -> LoadTicket:
        self._generations[resource] += 1
        return LoadTicket(resource=resource, generation=self._generations[resource])

    def _is_current(self, ticket: LoadTicket) -> bool:
        if self._torn_down or ticket.generation != self._generations.get(ticket.resource):
            logging.getLogger(__name__).debug(
                "Discarding %s load generation %s (stale or cancelled).",
                ticket.resource,
                ticket.generation,
            )
            return False
        return True

    def has_persisted_installed(self) -> bool:
        return any(value != 0 for value in self._installed.values())

    def begin_snapshot_load(self) -> Optional[LoadTicket]:
        """Start a snapshot load, or return ``None`` when persisted edits win."""

        if self._torn_down:
            return None
        if self.has_persisted_installed():
            logging.getLogger(__name__).debug(
                "Skipping %s load; persisted installed capacity takes precedence.",
                self.snapshot_name,
            )
            self.snapshot_state = LoadState.LOADED
            self.snapshot_message = None
            return None
        self.snapshot_state = LoadState.LOADING
        return self._issue("snapshot")

    def complete_snapshot_load(self, ticket: LoadTicket, values: Mapping[Source, float]) -> bool:
        if not self._is_current(ticket):
            return False
        updated = dict(self._installed)
        updated.update(values)
        self._installed = freeze_values(updated)
        _write_persisted(self._kv, self._installed_key, self._installed)
        self.snapshot_state = LoadState.LOADED
        self.snapshot_message = None
        return True

    def fail_snapshot_load(self, ticket: LoadTicket, error: BaseException) -> bool:
        if not self._is_current(ticket):
            return False
        logging.getLogger(__name__).warning("%s not loaded: %s", self.snapshot_name, error)
        self.snapshot_state = LoadState.LOAD_FAILED
        self.snapshot_message = f"{self.snapshot_name} not loaded – enter values manually."
        return True

    def begin_history_load(self) -> Optional[LoadTicket]:
        if self._torn_down:
            return None
        self.history_state = LoadState.LOADING
        self.history_message = None
        return self._issue("history")

    def complete_history_load(self, ticket: LoadTicket, rows: Sequence[HistoryRow]) -> bool:
        if not self._is_current(ticket):
            return False
        self._history = tuple(rows)
        self._selection = reconcile_selection(self._selection, self.month_options, self.months_back)
        self.history_state = LoadState.LOADED
        self.history_message = None
        return True

    def fail_history_load(self, ticket: LoadTicket, error: BaseException) -> bool:
        if not self._is_current(ticket):
            return False
        logging.getLogger(__name__).warning("%s not loaded: %s", self.history_name, error)
        self._history = ()
        self._selection = None
        self.history_state = LoadState.LOAD_FAILED
        self.history_message = (
            f"{self.history_name} not loaded – ensure it exists with a Month column "
            "(MM/YYYY) and source columns."
        )
        return True

    def teardown(self) -> None:
        """Stop accepting load results; later completions are discarded."""

        self._torn_down = True

    # ------------------------------------------------------------------
    # Synchronous loads
    # ------------------------------------------------------------------
    def load_snapshot(self, fetch: Callable[[], str]) -> LoadState:
        ticket = self.begin_snapshot_load()
        if ticket is None:
            return self.snapshot_state
        try:
            values = parse_snapshot(fetch())
        except Exception as exc:
            self.fail_snapshot_load(ticket, exc)
        else:
            self.complete_snapshot_load(ticket, values)
        return self.snapshot_state

    def load_history(self, fetch: Callable[[], str]) -> LoadState:
        ticket = self.begin_history_load()
        if ticket is None:
            return self.history_state
        try:
            rows = parse_history(fetch())
        except Exception as exc:
            self.fail_history_load(ticket, exc)
        else:
            self.complete_history_load(ticket, rows)
        return self.history_state
