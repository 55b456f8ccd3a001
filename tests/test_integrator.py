"""Tests for the RK4 integrator and the pure step transition."""

import pytest

from ecosim.dynamics import derivatives
from ecosim.integrator import SimulationState, integrate_populations, step
from ecosim.parameters import SimulationParameters


class TestSimulationState:
    def test_initial_state_uses_initial_populations(self, parsed_balanced):
        state = SimulationState.initial(parsed_balanced)
        assert state == SimulationState(time=0.0, prey=1000.0, predator=100.0)


class TestIntegratePopulations:
    """Tests for integrate_populations."""

    def test_clock_is_not_advanced(self, parsed_balanced):
        state = SimulationState(time=1.5, prey=800.0, predator=90.0)
        assert integrate_populations(state, parsed_balanced).time == 1.5

    def test_fixed_point_is_preserved(self, fixed_point_params):
        params = SimulationParameters.from_dict(fixed_point_params)
        state = SimulationState.initial(params)
        for _ in range(100):
            state = step(state, params)
        assert state.prey == pytest.approx(100.0, abs=1e-9)
        assert state.predator == pytest.approx(68.0, abs=1e-9)

    def test_close_to_euler_for_small_steps(self, parsed_balanced):
        """One RK4 step agrees with an Euler step to first order."""
        state = SimulationState(time=0.0, prey=1000.0, predator=100.0)
        dt = 1e-5
        rates = derivatives(1000.0, 100.0, 0.7, parsed_balanced)
        result = integrate_populations(state, parsed_balanced, dt)
        assert result.prey == pytest.approx(1000.0 + dt * rates.d_prey, rel=1e-9)
        assert result.predator == pytest.approx(100.0 + dt * rates.d_predator, rel=1e-9)

    def test_populations_clamped_at_zero(self):
        """A step that would overshoot below zero lands exactly on zero."""
        # Without resources only the competition term acts, and every stage is negative
        params = SimulationParameters.from_dict(
            {
                "prey": {"initialPopulation": 100, "birthRate": 1.0, "carryingCapacity": 1},
                "predator": {"initialPopulation": 0, "huntingEfficiency": 0.0, "deathRate": 0.5},
                "environment": {"resourceAvailability": 0.0},
            }
        )
        result = integrate_populations(SimulationState.initial(params), params, dt=1.0)
        assert result.prey == 0.0
        assert result.predator == 0.0


class TestStep:
    def test_advances_time_by_dt(self, parsed_balanced):
        state = SimulationState.initial(parsed_balanced)
        assert step(state, parsed_balanced, dt=0.25).time == 0.25

    def test_is_pure(self, parsed_balanced):
        state = SimulationState.initial(parsed_balanced)
        first = step(state, parsed_balanced)
        second = step(state, parsed_balanced)
        assert first == second
        assert state.time == 0.0
