"""
Tests for connectivity classification
"""

import pytest

from ..schemas.connectivity import (
    ConnectivityState,
    ConnectivityClass,
    ConnectivityReading,
    Transition,
    classify_transition,
    OutageReport,
)


def reading(raw):
    return ConnectivityReading.parse(raw)


class TestParse:
    """Tests for ConnectivityReading.parse"""

    @pytest.mark.parametrize("raw, state", [
        ("FULL", ConnectivityState.FULL),
        ("full", ConnectivityState.FULL),
        (" NONE\n", ConnectivityState.NONE),
        ("LIMITED", ConnectivityState.LIMITED),
    ])
    def test_known(self, raw, state):
        parsed = reading(raw)
        assert parsed.state is state
        assert parsed.raw == state.value

    @pytest.mark.parametrize("raw", ["PORTAL", "UNKNOWN", "weird"])
    def test_other_keeps_raw(self, raw):
        parsed = reading(raw)
        assert parsed.state is ConnectivityState.OTHER
        assert parsed.raw == raw

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_is_unknown(self, raw):
        parsed = reading(raw)
        assert parsed.state is ConnectivityState.OTHER
        assert parsed.raw == "UNKNOWN"

    def test_classes(self):
        assert reading("FULL").connectivity_class is ConnectivityClass.CONNECTED
        assert reading("NONE").connectivity_class is ConnectivityClass.DISCONNECTED
        assert reading("LIMITED").connectivity_class is ConnectivityClass.DISCONNECTED
        assert reading("PORTAL").connectivity_class is ConnectivityClass.UNEXPECTED


class TestClassifyTransition:
    """Tests for the transition table"""

    @pytest.mark.parametrize("previous, incoming, expected", [
        ("FULL", "NONE", Transition.OUTAGE_OPEN),
        ("FULL", "LIMITED", Transition.OUTAGE_OPEN),
        ("NONE", "FULL", Transition.OUTAGE_CLOSE),
        ("LIMITED", "FULL", Transition.OUTAGE_CLOSE),
        ("FULL", "FULL", Transition.STEADY),
        ("NONE", "LIMITED", Transition.STEADY),
        ("LIMITED", "NONE", Transition.STEADY),
        ("PORTAL", "FULL", Transition.UNEXPECTED),
        ("FULL", "PORTAL", Transition.UNEXPECTED),
        ("NONE", "UNKNOWN", Transition.UNEXPECTED),
    ])
    def test_pairs(self, previous, incoming, expected):
        assert classify_transition(reading(previous), reading(incoming)) is expected

    @pytest.mark.parametrize("incoming", ["FULL", "NONE", "PORTAL"])
    def test_first_run_seeds(self, incoming):
        assert classify_transition(None, reading(incoming)) is Transition.SEED


class TestOutageReport:
    """Tests for OutageReport"""

    def test_format(self):
        report = OutageReport.between(100, 200)
        assert report.duration == 100
        assert report.format_value() == "100 - 200 (100 seconds)"
