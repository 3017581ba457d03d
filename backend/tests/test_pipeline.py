"""Tests for the generic five-phase runner."""

from __future__ import annotations

import pytest

from paloalto_zoning.zoning_engine.pipeline import PhaseStep, run_phases
from paloalto_zoning.zoning_engine.zone_table import UnknownZoneError


def _steps(values, seen=None):
    def make(key, value):
        def run(prev):
            if seen is not None:
                seen.append((key, sorted(prev)))
            if isinstance(value, Exception):
                raise value
            return value
        return run
    return [PhaseStep(f"phase{i}", f"Phase {i}", make(f"phase{i}", v))
            for i, v in enumerate(values, start=1)]


class TestRunPhases:

    def test_threads_prior_results(self):
        seen = []
        outcome = run_phases(_steps(["a", "b", "c"], seen), should_stop=lambda r: False)
        assert not outcome.stopped and outcome.error is None
        assert outcome.results == {"phase1": "a", "phase2": "b", "phase3": "c"}
        assert seen == [
            ("phase1", []),
            ("phase2", ["phase1"]),
            ("phase3", ["phase1", "phase2"]),
        ]

    def test_stop_after_first_phase(self):
        outcome = run_phases(_steps(["stop", "b"]), should_stop=lambda r: r == "stop")
        assert outcome.stopped
        assert outcome.error is None
        assert list(outcome.results) == ["phase1"]

    def test_stop_only_checked_on_first_phase(self):
        outcome = run_phases(_steps(["a", "stop", "c"]), should_stop=lambda r: r == "stop")
        assert not outcome.stopped and outcome.error is None
        assert len(outcome.results) == 3

    def test_unexpected_error_keeps_completed_phases(self):
        outcome = run_phases(
            _steps(["a", RuntimeError("boom"), "c"]), should_stop=lambda r: False,
        )
        assert outcome.error == "Phase 2: boom"
        assert list(outcome.results) == ["phase1"]
        assert not outcome.stopped

    def test_unknown_zone_propagates(self):
        with pytest.raises(UnknownZoneError):
            run_phases(_steps([UnknownZoneError("R-9")]), should_stop=lambda r: False)
