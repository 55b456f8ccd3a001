"""Deterministic predator-prey ecosystem engine.

This package contains the pure simulation logic with no host dependencies.
Key modules include:

- dynamics: resource forcing and the modified Lotka-Volterra derivatives
- integrator: fixed-step RK4 and the pure ``step`` transition
- detectors: equilibrium and extinction monitors
- simulator: the driver (run-to-completion and streaming batches)
- analysis: equilibrium prediction and phase-space sampling
- presets: named parameter sets

Design note: this module exposes a small, explicit public API via ``__all__``.
"""

from ecosim.analysis import (
    EquilibriumPrediction,
    PhaseVector,
    predict_equilibrium,
    sample_phase_space,
)
from ecosim.config.simulation_config import SimulationConfig
from ecosim.dynamics import Derivatives, derivatives, resource_level
from ecosim.exceptions import (
    DivisionByZeroError,
    EcosimError,
    InvalidParametersError,
    NumericDegeneracyError,
)
from ecosim.integrator import SimulationState, integrate_populations, step
from ecosim.parameters import (
    EnvironmentParameters,
    PredatorParameters,
    PreyParameters,
    SimulationParameters,
)
from ecosim.results import (
    EquilibriumPoint,
    SimulationResult,
    SimulationSummary,
    TimeStepRecord,
)
from ecosim.simulator import EcosystemSimulator

__version__ = "1.0.0"

__all__ = [
    "Derivatives",
    "DivisionByZeroError",
    "EcosimError",
    "EcosystemSimulator",
    "EnvironmentParameters",
    "EquilibriumPoint",
    "EquilibriumPrediction",
    "InvalidParametersError",
    "NumericDegeneracyError",
    "PhaseVector",
    "PredatorParameters",
    "PreyParameters",
    "SimulationConfig",
    "SimulationParameters",
    "SimulationResult",
    "SimulationState",
    "SimulationSummary",
    "TimeStepRecord",
    "derivatives",
    "integrate_populations",
    "predict_equilibrium",
    "resource_level",
    "sample_phase_space",
    "step",
]
