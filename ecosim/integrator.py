"""Fixed-step fourth-order Runge-Kutta integration.

The resource level is sampled once at the start of each step and reused for
all four stages, so forcing is frozen within a micro-step. Populations are
floor-clamped at zero after every step.
"""

from dataclasses import dataclass, replace

from ecosim.config.simulation import DT
from ecosim.dynamics import derivatives, resource_level
from ecosim.parameters import SimulationParameters


@dataclass(frozen=True)
class SimulationState:
    """Raw engine state at one instant.

    Attributes:
        time: Current simulation time.
        prey: Prey population (never negative).
        predator: Predator population (never negative).
    """

    time: float
    prey: float
    predator: float

    @classmethod
    def initial(cls, params: SimulationParameters) -> "SimulationState":
        """State at time zero built from the initial populations."""
        return cls(
            time=0.0,
            prey=params.prey.initial_population,
            predator=params.predator.initial_population,
        )


def integrate_populations(
    state: SimulationState,
    params: SimulationParameters,
    dt: float = DT,
) -> SimulationState:
    """Advance both populations by one RK4 step without moving the clock."""
    prey, predator = state.prey, state.predator
    resource = resource_level(state.time, params.environment)

    k1 = derivatives(prey, predator, resource, params)
    k2 = derivatives(
        prey + 0.5 * dt * k1.d_prey,
        predator + 0.5 * dt * k1.d_predator,
        resource,
        params,
    )
    k3 = derivatives(
        prey + 0.5 * dt * k2.d_prey,
        predator + 0.5 * dt * k2.d_predator,
        resource,
        params,
    )
    k4 = derivatives(
        prey + dt * k3.d_prey,
        predator + dt * k3.d_predator,
        resource,
        params,
    )

    new_prey = max(
        0.0,
        prey + (dt / 6) * (k1.d_prey + 2 * k2.d_prey + 2 * k3.d_prey + k4.d_prey),
    )
    new_predator = max(
        0.0,
        predator
        + (dt / 6) * (k1.d_predator + 2 * k2.d_predator + 2 * k3.d_predator + k4.d_predator),
    )

    return replace(state, prey=new_prey, predator=new_predator)


def step(
    state: SimulationState,
    params: SimulationParameters,
    dt: float = DT,
) -> SimulationState:
    """Pure state transition: one RK4 step followed by advancing time by ``dt``."""
    advanced = integrate_populations(state, params, dt)
    return replace(advanced, time=state.time + dt)
