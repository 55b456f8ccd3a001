"""Policy constants of the modified Lotka-Volterra equations.

These have no physical derivation; they are tuned policy that produces the
engine's boom/bust and extinction regimes.
"""

# Fraction of predation converted into predator growth.
PREDATION_CREDIT = 0.5

# Prey count below which predators starve faster.
STARVATION_THRESHOLD = 10.0

# Death-rate multiplier applied while prey is below STARVATION_THRESHOLD.
STARVATION_MULTIPLIER = 2.0

# Length of one seasonal cycle in time units (annual cycle of 12 months).
SEASON_LENGTH = 12.0

# Equilibrium predictor caps the prey estimate at this fraction of capacity.
PREDICTED_PREY_CAPACITY_FRACTION = 0.8

# Phase-space predator axis spans this multiple of the initial predator count.
PHASE_SPACE_PREDATOR_SPAN = 10.0

# Default phase-space grid resolution for direct engine calls.
DEFAULT_PHASE_SPACE_RESOLUTION = 20
