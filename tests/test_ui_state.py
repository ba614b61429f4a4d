import json
import unittest
from contextlib import ExitStack
from dataclasses import replace
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

import streamlit as st

from services.capacity_store import INSTALLED_KEY, PLF_KEY, LoadState, Source
from utils.config import load_config
from utils.persistence import MemoryKeyValueStore
from utils.ui_state import (
    CAPACITY_LOADS_SESSION_KEY,
    CAPACITY_STORE_SESSION_KEY,
    bootstrap_capacity_state,
    reload_capacity_state,
    settle_capacity_loads,
)


class CapacitySessionTests(unittest.TestCase):
    def setUp(self) -> None:
        # Provide an isolated session_state and persistence store per test.
        self.session_state = {}
        self.kv = MemoryKeyValueStore()
        self._tmp = TemporaryDirectory()
        base_dir = Path(self._tmp.name)
        data_dir = base_dir / "data"
        data_dir.mkdir()
        (data_dir / "Capacity.csv").write_text("Coal,Solar\n218.16,105.65\n", encoding="utf-8")
        (data_dir / "capacity_monthly.csv").write_text(
            "Month,Coal\n01/2023,50\n01/2024,55\n", encoding="utf-8"
        )
        self.cfg = load_config(base_dir, overrides={})

    def tearDown(self) -> None:
        loads = self.session_state.get(CAPACITY_LOADS_SESSION_KEY)
        if loads is not None:
            loads.cancel()
        self._tmp.cleanup()

    def _patched_streamlit(self) -> ExitStack:
        stack = ExitStack()
        stack.enter_context(mock.patch.object(st, "session_state", self.session_state))
        self.shared_persistence = stack.enter_context(
            mock.patch("utils.ui_state._shared_persistence", return_value=self.kv)
        )
        return stack

    def test_bootstrap_starts_loads_once_per_session(self) -> None:
        with self._patched_streamlit():
            store = bootstrap_capacity_state(self.cfg)
            self.assertFalse(settle_capacity_loads(5))
            again = bootstrap_capacity_state(self.cfg)

        self.assertIs(store, again)
        self.assertIs(self.session_state[CAPACITY_STORE_SESSION_KEY], store)
        self.assertEqual(store.snapshot_state, LoadState.LOADED)
        self.assertEqual(store.installed[Source.COAL], 218.16)
        self.assertEqual(store.month_options, ["01/2023", "01/2024"])
        self.assertEqual(json.loads(self.session_state[INSTALLED_KEY])["Solar"], 105.65)
        self.assertIsNone(self.kv.get_item(INSTALLED_KEY))

    def test_reload_tears_down_previous_store(self) -> None:
        with self._patched_streamlit():
            first = bootstrap_capacity_state(self.cfg)
            settle_capacity_loads(5)
            first.set_installed(Source.WIND, 50.0)

            second = reload_capacity_state(self.cfg)
            settle_capacity_loads(5)

        self.assertTrue(first.torn_down)
        self.assertIsNot(first, second)
        # Persisted edits win over the snapshot on the new store.
        self.assertEqual(second.installed[Source.WIND], 50.0)
        self.assertEqual(second.snapshot_state, LoadState.LOADED)
        self.assertEqual(second.history_state, LoadState.LOADED)

    def test_default_edits_stay_in_their_own_session(self) -> None:
        with self._patched_streamlit():
            first = bootstrap_capacity_state(self.cfg)
            settle_capacity_loads(5)
            first.set_installed(Source.WIND, 50.0)

        other_session = {}
        with mock.patch.object(st, "session_state", other_session), mock.patch(
            "utils.ui_state._shared_persistence", side_effect=AssertionError("shared store used")
        ):
            second = bootstrap_capacity_state(self.cfg)
            settle_capacity_loads(5)

        self.assertEqual(first.installed[Source.WIND], 50.0)
        self.assertEqual(second.installed[Source.WIND], 0.0)
        self.assertEqual(second.installed[Source.COAL], 218.16)
        other_session[CAPACITY_LOADS_SESSION_KEY].cancel()

    def test_configured_state_file_uses_shared_store(self) -> None:
        cfg = replace(self.cfg, state_file="state.json")
        with self._patched_streamlit():
            store = bootstrap_capacity_state(cfg)
            settle_capacity_loads(5)
            store.set_plf(Source.COAL, 85.0)

        self.shared_persistence.assert_called_once_with(str(cfg.data_dir / "state.json"))
        self.assertEqual(json.loads(self.kv.get_item(PLF_KEY))["Coal"], 85.0)
        self.assertNotIn(PLF_KEY, self.session_state)

    def test_settle_without_session_is_noop(self) -> None:
        with self._patched_streamlit():
            self.assertFalse(settle_capacity_loads(0))


if __name__ == "__main__":
    unittest.main()
