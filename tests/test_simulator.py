"""Tests for the simulation driver.

Reference figures were produced by long runs of the same fixed-step scheme;
they are compared with tolerances where float accumulation matters.
"""

import orjson
import pytest

from ecosim.config.simulation_config import SimulationConfig
from ecosim.exceptions import InvalidParametersError
from ecosim.presets import get_preset
from ecosim.results import round_half_up
from ecosim.simulator import EcosystemSimulator


def _run(parameters, **config):
    return EcosystemSimulator(parameters, SimulationConfig(**config) if config else None).run()


class TestConstruction:
    """Parameter validation happens before any state is built."""

    def test_missing_block_rejected(self, balanced_params):
        del balanced_params["environment"]
        with pytest.raises(InvalidParametersError, match="Required: prey, predator"):
            EcosystemSimulator(balanced_params)

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidParametersError):
            EcosystemSimulator(None)

    def test_initial_state(self, balanced_params):
        sim = EcosystemSimulator(balanced_params)
        assert sim.time == 0.0
        assert sim.prey == 1000.0
        assert sim.predator == 100.0
        assert sim.resource_level == 0.7
        assert sim.history == []
        assert not sim.finished


class TestRecording:
    def test_first_record_after_one_interval(self, balanced_params):
        result = _run(balanced_params)
        # The clock reaches 0.1 only after float accumulation passes it
        assert result.time_steps[0].time == 0.11
        assert result.time_steps[0].prey_population > 0

    def test_records_rounded(self, damped_params):
        result = _run(damped_params)
        for record in result.time_steps:
            assert record.time == round_half_up(record.time, 2)
            assert record.prey_population == round_half_up(record.prey_population, 1)
            assert record.predator_population == round_half_up(record.predator_population, 1)

    def test_records_spaced_by_interval(self, damped_params):
        records = _run(damped_params).time_steps
        gaps = [b.time - a.time for a, b in zip(records, records[1:-1])]
        assert all(gap == pytest.approx(0.1, abs=0.011) for gap in gaps)

    def test_final_record_matches_duration(self, damped_params):
        result = _run(damped_params)
        assert result.time_steps[-1].time == round_half_up(result.summary.duration, 2)

    def test_zero_horizon_yields_single_record(self, balanced_params):
        result = _run(balanced_params, horizon=0.0)
        assert len(result.time_steps) == 1
        assert result.time_steps[0].prey_population == 1000.0
        assert result.summary.duration == 0.0


class TestProperties:
    """Invariants that hold for every parameter set."""

    @pytest.mark.parametrize(
        "preset", ["Balanced Ecosystem", "Predator Dominant", "Boom and Bust", "Resource Scarcity"]
    )
    def test_deterministic(self, preset):
        parameters = get_preset(preset)["parameters"]
        first, second = _run(parameters), _run(parameters)
        assert first == second
        assert orjson.dumps(first.to_dict()) == orjson.dumps(second.to_dict())

    @pytest.mark.parametrize(
        "preset", ["Balanced Ecosystem", "Predator Dominant", "Boom and Bust", "Resource Scarcity"]
    )
    def test_populations_never_negative(self, preset):
        result = _run(get_preset(preset)["parameters"])
        for record in result.time_steps:
            assert record.prey_population >= 0
            assert record.predator_population >= 0
        assert result.summary.final_prey >= 0
        assert result.summary.final_predator >= 0

    def test_seasonal_resource_levels_in_bounds(self, seasonal_params):
        result = _run(seasonal_params)
        assert all(0.0 <= r.resource_level <= 1.0 for r in result.time_steps)

    def test_extinction_is_final(self, predator_dominant_params):
        """Nothing is recorded after the step that caused extinction."""
        result = _run(predator_dominant_params)
        assert result.extinction_occurred
        assert min(result.summary.final_prey, result.summary.final_predator) < 1.0
        times = [r.time for r in result.time_steps]
        assert times == sorted(times)
        assert times[-1] == round_half_up(result.summary.duration, 2)


class TestOutcomes:
    """Reference trajectories."""

    def test_balanced_preset_collapses(self, balanced_params):
        result = _run(balanced_params)
        assert result.extinction_occurred
        assert not result.equilibrium_reached
        assert result.summary.duration == pytest.approx(2.51, abs=0.01)
        assert len(result.time_steps) == 25
        assert result.summary.final_prey < 1.0

    def test_predator_dominant_collapses_first(self, balanced_params, predator_dominant_params):
        balanced = _run(balanced_params)
        dominant = _run(predator_dominant_params)
        assert dominant.extinction_occurred
        assert dominant.summary.duration == pytest.approx(0.91, abs=0.01)
        assert dominant.summary.duration < balanced.summary.duration

    def test_resource_scarcity_starves_predators(self):
        result = _run(get_preset("Resource Scarcity")["parameters"])
        assert result.extinction_occurred
        assert result.summary.final_predator < 1.0
        assert result.summary.duration == pytest.approx(7.99, abs=0.02)

    def test_fixed_point_reaches_equilibrium(self, fixed_point_params):
        result = _run(fixed_point_params)
        assert result.equilibrium_reached
        assert not result.extinction_occurred
        point = result.equilibrium_point
        assert point.prey == pytest.approx(100.0)
        assert point.predator == pytest.approx(68.0)
        assert point.time_reached == pytest.approx(5.32, abs=0.02)
        assert all(r.prey_population == 100.0 for r in result.time_steps)
        assert all(r.predator_population == 68.0 for r in result.time_steps)

    def test_horizon_shrinks_after_equilibrium(self, fixed_point_params):
        result = _run(fixed_point_params)
        reached = result.equilibrium_point.time_reached
        assert result.summary.duration == pytest.approx(reached + 10.0, abs=0.02)
        assert len(result.time_steps) == 141

    def test_horizon_not_extended_past_limit(self, damped_params):
        """Equilibrium late in the run cannot push past the configured horizon."""
        result = _run(damped_params)
        assert result.equilibrium_reached
        assert result.equilibrium_point.time_reached == pytest.approx(97.6, abs=0.1)
        assert result.summary.duration == pytest.approx(100.0, abs=0.01)
        assert result.equilibrium_point.prey == pytest.approx(100.94, abs=0.05)
        assert result.equilibrium_point.predator == pytest.approx(89.46, abs=0.05)
        assert len(result.time_steps) == 958

    def test_custom_horizon(self, damped_params):
        result = _run(damped_params, horizon=5.0)
        assert result.summary.duration == pytest.approx(5.0, abs=0.02)
        assert not result.equilibrium_reached


class TestStreaming:
    """advance()/result() against run()."""

    def test_stream_matches_run(self, fixed_point_params):
        expected = _run(fixed_point_params)

        sim = EcosystemSimulator(fixed_point_params)
        while not sim.finished:
            sim.advance(10)
        assert sim.result() == expected

    def test_stream_matches_run_on_extinction(self, predator_dominant_params):
        expected = _run(predator_dominant_params)

        sim = EcosystemSimulator(predator_dominant_params)
        while not sim.finished:
            sim.advance(7)
        assert sim.result() == expected

    def test_advance_returns_raw_state(self, balanced_params):
        sim = EcosystemSimulator(balanced_params)
        state = sim.advance(10)
        assert state is sim.state
        assert state.time == pytest.approx(0.1)

    def test_advance_after_finish_is_noop(self, predator_dominant_params):
        sim = EcosystemSimulator(predator_dominant_params)
        sim.run()
        before = sim.state
        assert sim.advance(10) is before

    def test_result_is_idempotent(self, balanced_params):
        sim = EcosystemSimulator(balanced_params)
        first = sim.run()
        assert sim.result() is first
        assert sim.run() is first

    def test_early_result_freezes_run(self, balanced_params):
        sim = EcosystemSimulator(balanced_params)
        sim.advance(50)
        result = sim.result()
        assert sim.finished
        assert result.summary.duration == pytest.approx(0.5)
        assert sim.advance(10).time == pytest.approx(0.5)
