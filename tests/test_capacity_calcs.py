import pytest

from services.capacity_calcs import (
    historical_comparison,
    net_additions,
    net_indicator,
    rated_capacity,
    rated_value,
    totals,
)
from services.capacity_store import SOURCES, CapacityStore, Source
from services.month_keys import Selection
from utils.numeric import format2, format_signed2
from utils.persistence import MemoryKeyValueStore


def _store_with_history(text):
    store = CapacityStore(MemoryKeyValueStore())
    store.load_history(lambda: text)
    return store


@pytest.mark.parametrize(
    "installed, plf, expected",
    [
        (100, 85, 85.0),
        (0, 85, 0.0),
        (47.73, 33.3, 15.89),
        (12.0, 0, 0.0),
        (10, 100, 10.0),
    ],
)
def test_rated_value_is_installed_times_plf_rounded(installed, plf, expected):
    assert rated_value(installed, plf) == pytest.approx(expected)


def test_rated_capacity_per_source_and_totals():
    installed = {Source.COAL: 100.0, Source.SOLAR: 50.5}
    plf = {Source.COAL: 85.0, Source.SOLAR: 20.0}

    rated = rated_capacity(installed, plf)

    assert format2(rated.per_source[Source.COAL]) == "85.00"
    assert rated.per_source[Source.SOLAR] == pytest.approx(10.1)
    assert rated.per_source[Source.WIND] == 0.0
    assert list(rated.per_source) == list(SOURCES)
    assert rated.total == pytest.approx(95.1)
    assert rated.installed_total == pytest.approx(150.5)


def test_totals_fill_missing_sources_with_zero():
    result = totals({Source.COAL: 1.5, Source.WIND: 2.0})

    assert result.per_source[Source.HYDRO] == 0.0
    assert result.total == pytest.approx(3.5)
    assert totals(None) is None


def test_net_additions_default_to_zero_when_a_side_is_missing():
    end = totals({Source.COAL: 5.0})

    for start_side, end_side in ((None, end), (end, None), (None, None)):
        net = net_additions(start_side, end_side)
        assert net.complete is False
        assert net.total == 0.0
        assert all(value == 0.0 for value in net.per_source.values())


def test_net_indicator_by_sign():
    assert net_indicator(0.5) == "positive"
    assert net_indicator(-0.01) == "negative"
    assert net_indicator(0.0) == "neutral"


def test_coal_only_history_yields_plus_five():
    store = _store_with_history("Month,Coal\n01/2023,50\n01/2024,55\n")

    comparison = historical_comparison(store.history, store.selection)

    assert comparison.selection == Selection(start="01/2023", end="01/2024")
    assert comparison.net.complete
    assert format_signed2(comparison.net.per_source[Source.COAL]) == "+5.00"
    assert comparison.net.per_source[Source.SOLAR] == 0.0
    assert comparison.net.total == pytest.approx(5.0)


def test_total_net_addition_matches_sum_of_source_diffs():
    store = _store_with_history("Month,Coal,Solar,Wind\n01/2023,50,10,4\n01/2024,55,7.5,4\n")

    net = historical_comparison(store.history, store.selection).net

    assert net.per_source[Source.SOLAR] == pytest.approx(-2.5)
    assert net.per_source[Source.WIND] == 0.0
    assert net.total == pytest.approx(sum(net.per_source.values()))
    assert net_indicator(net.per_source[Source.SOLAR]) == "negative"


def test_comparison_without_selection_is_incomplete():
    comparison = historical_comparison((), None)

    assert comparison.start is None
    assert comparison.end is None
    assert comparison.net.complete is False


def test_comparison_with_unknown_month_is_incomplete():
    store = _store_with_history("Month,Coal\n01/2023,50\n01/2024,55\n")

    comparison = historical_comparison(store.history, Selection(start="06/2023", end="01/2024"))

    assert comparison.start is None
    assert comparison.end.total == pytest.approx(55.0)
    assert comparison.net.complete is False
