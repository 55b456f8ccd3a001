"""Simulation driver: owns the loop around the pure step functions.

One ``EcosystemSimulator`` is one isolated run. It records the trajectory at
a fixed cadence, watches for extinction after every integration step and
for equilibrium whenever a new sample arrives, and shortens the horizon once
equilibrium is found.

Two ways to drive it:

    # Run to completion
    result = EcosystemSimulator(params).run()

    # Streaming: the host decides when to request the next batch
    sim = EcosystemSimulator(params)
    while not sim.finished:
        state = sim.advance(10)
        publish(state)
    result = sim.result()

Both produce identical results because a streamed micro-step is exactly one
iteration of the run loop.
"""

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from ecosim.config.simulation import STREAM_BATCH_STEPS
from ecosim.config.simulation_config import SimulationConfig
from ecosim.detectors import EquilibriumDetector, ExtinctionDetector
from ecosim.dynamics import resource_level
from ecosim.integrator import SimulationState, integrate_populations
from ecosim.parameters import SimulationParameters
from ecosim.results import (
    EquilibriumPoint,
    SimulationResult,
    SimulationSummary,
    TimeStepRecord,
)

logger = logging.getLogger(__name__)


class EcosystemSimulator:
    """Predator-prey run over a fixed-step RK4 integrator.

    Attributes:
        params: Immutable parameters of this run.
        config: Driver settings (step size, horizon, detector settings).
        state: Current raw state at full precision.
        horizon: Time at which the run stops; may shrink after equilibrium.
        history: Recorded samples so far, in time order.
    """

    def __init__(
        self,
        parameters: Union[SimulationParameters, Mapping[str, Any]],
        config: Optional[SimulationConfig] = None,
    ) -> None:
        """Build the initial state.

        Args:
            parameters: Parsed parameters or a nested camelCase mapping.
            config: Optional driver settings; defaults reproduce the
                reference behavior.

        Raises:
            InvalidParametersError: If the parameter set is structurally invalid.
        """
        self.params = SimulationParameters.coerce(parameters)
        self.config = config or SimulationConfig()
        self.state = SimulationState.initial(self.params)
        self.horizon = self.config.horizon
        self.history: list[TimeStepRecord] = []

        self._last_record_time = 0.0
        self._equilibrium = EquilibriumDetector(
            window=self.config.equilibrium_window,
            tolerance=self.config.equilibrium_tolerance,
        )
        self._extinction = ExtinctionDetector(threshold=self.config.extinction_threshold)
        self._result: Optional[SimulationResult] = None

        logger.debug(
            "Simulator created (prey=%s, predator=%s, horizon=%s)",
            self.state.prey,
            self.state.predator,
            self.horizon,
        )

    # ------------------------------------------------------------------
    # Raw state accessors
    # ------------------------------------------------------------------

    @property
    def time(self) -> float:
        return self.state.time

    @property
    def prey(self) -> float:
        return self.state.prey

    @property
    def predator(self) -> float:
        return self.state.predator

    @property
    def resource_level(self) -> float:
        """Resource level at the current time."""
        return resource_level(self.state.time, self.params.environment)

    @property
    def equilibrium_reached(self) -> bool:
        return self._equilibrium.reached

    @property
    def equilibrium_point(self) -> Optional[EquilibriumPoint]:
        return self._equilibrium.point

    @property
    def extinction_occurred(self) -> bool:
        return self._extinction.occurred

    @property
    def finished(self) -> bool:
        """True once the horizon is reached, extinction occurred or the result was built."""
        return (
            self._result is not None
            or self._extinction.occurred
            or self.state.time >= self.horizon
        )

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def run(self) -> SimulationResult:
        """Run until the horizon or extinction and return the result."""
        while not self.finished:
            self._tick()
        return self.result()

    def advance(self, steps: int = STREAM_BATCH_STEPS) -> SimulationState:
        """Advance up to ``steps`` micro-steps atomically.

        Stops early if the run finishes mid-batch (extinction is checked
        after every micro-step).

        Returns:
            The raw state after the batch.
        """
        for _ in range(steps):
            if self.finished:
                break
            self._tick()
        return self.state

    def result(self) -> SimulationResult:
        """Finalize the run and return its result.

        The first call appends the final record unconditionally and freezes
        the run; later calls return the same result.
        """
        if self._result is None:
            self._record()
            self._result = SimulationResult(
                time_steps=tuple(self.history),
                equilibrium_reached=self._equilibrium.reached,
                equilibrium_point=self._equilibrium.point,
                extinction_occurred=self._extinction.occurred,
                summary=SimulationSummary.from_records(
                    self.history,
                    duration=self.state.time,
                    final_prey=self.state.prey,
                    final_predator=self.state.predator,
                ),
            )
            logger.debug(
                "Simulation finished at t=%.2f: %d records, equilibrium=%s, extinction=%s",
                self.state.time,
                len(self.history),
                self._result.equilibrium_reached,
                self._result.extinction_occurred,
            )
        return self._result

    def _tick(self) -> None:
        """One iteration of the run loop: record, integrate, detect, advance time."""
        time = self.state.time
        if time - self._last_record_time >= self.config.record_interval:
            self._record()
            self._last_record_time = time

        self.state = integrate_populations(self.state, self.params, self.config.dt)

        if self._extinction.check(self.state.prey, self.state.predator):
            logger.info(
                "Extinction at t=%.2f (prey=%.3f, predator=%.3f)",
                time,
                self.state.prey,
                self.state.predator,
            )
            return

        if not self._equilibrium.reached and self._equilibrium.check(time) is not None:
            grace = min(self.config.post_equilibrium_grace, self.horizon - time)
            self.horizon = time + grace

        self.state = replace(self.state, time=time + self.config.dt)

    def _record(self) -> None:
        record = TimeStepRecord.capture(
            self.state.time, self.state.prey, self.state.predator, self.resource_level
        )
        self.history.append(record)
        self._equilibrium.observe(record)
